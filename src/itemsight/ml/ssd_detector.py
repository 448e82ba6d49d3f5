"""SSD object detector backed by an ONNX Runtime session.

Expects the TensorFlow Object Detection API export layout used by the ONNX
model zoo SSD graphs: a ``uint8`` NHWC image input and four outputs
(boxes, classes, scores, num_detections). Boxes are normalized
``[ymin, xmin, ymax, xmax]`` and class ids follow the 91-id COCO map.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import numpy as np

from itemsight.ml.detector import COCO91_LABELS
from itemsight.vision.bitmap import BoundingBox
from itemsight.vision.models import RawDetection

if TYPE_CHECKING:
    from collections.abc import Mapping

    from numpy.typing import NDArray

    from itemsight.ml.model_manager import ModelManager
    from itemsight.vision.bitmap import Bitmap

logger = logging.getLogger(__name__)


class SsdObjectDetector:
    """Detector that runs an SSD graph through the model manager's session cache."""

    def __init__(
        self,
        model_manager: ModelManager,
        model_name: str,
        labels: Mapping[int, str] = COCO91_LABELS,
    ) -> None:
        self._model_manager = model_manager
        self._model_name = model_name
        self._labels = labels

    @property
    def model_name(self) -> str:
        return self._model_name

    @property
    def is_ready(self) -> bool:
        """Whether the model session is already loaded."""
        return self._model_name in self._model_manager.get_loaded_models()

    def warm_up(self) -> None:
        """Load the session ahead of the first request."""
        self._model_manager.get_session(self._model_name)

    def detect(self, bitmap: Bitmap, max_results: int, confidence_threshold: float) -> list[RawDetection]:
        session = self._model_manager.get_session(self._model_name)
        input_name = session.get_inputs()[0].name
        batch = bitmap.to_array()[np.newaxis, ...]
        boxes, classes, scores, num_detections = session.run(None, {input_name: batch})

        count = int(np.asarray(num_detections).reshape(-1)[0])
        return self._decode(
            boxes=np.asarray(boxes, dtype=np.float32)[0][:count],
            classes=np.asarray(classes)[0][:count],
            scores=np.asarray(scores, dtype=np.float32)[0][:count],
            width=bitmap.width,
            height=bitmap.height,
            max_results=max_results,
            confidence_threshold=confidence_threshold,
        )

    def _decode(
        self,
        *,
        boxes: NDArray[np.float32],
        classes: NDArray[np.generic],
        scores: NDArray[np.float32],
        width: int,
        height: int,
        max_results: int,
        confidence_threshold: float,
    ) -> list[RawDetection]:
        # Highest scores first so the max_results cut keeps the strongest boxes.
        order = np.argsort(-scores, kind="stable")
        detections: list[RawDetection] = []
        for idx in order:
            score = float(np.clip(scores[idx], 0.0, 1.0))
            if score < confidence_threshold:
                break
            class_id = int(classes[idx])
            label = self._labels.get(class_id)
            if label is None:
                logger.debug("Skipping detection with unmapped class id %d", class_id)
                continue
            detections.append(RawDetection(label=label, confidence=score, bbox=_to_pixel_box(boxes[idx], width, height)))
            if len(detections) >= max_results:
                break
        return detections


def _to_pixel_box(box: NDArray[np.float32], width: int, height: int) -> BoundingBox:
    ymin, xmin, ymax, xmax = (float(v) for v in np.clip(box, 0.0, 1.0))
    left, top = round(xmin * width), round(ymin * height)
    right, bottom = round(xmax * width), round(ymax * height)
    return BoundingBox(x=left, y=top, width=max(right - left, 0), height=max(bottom - top, 0))
