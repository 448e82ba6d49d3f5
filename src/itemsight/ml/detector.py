"""Object detector protocol and the COCO label vocabulary.

Any backend that can turn a bitmap into labeled boxes can drive the pipeline.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from itemsight.vision.bitmap import Bitmap
    from itemsight.vision.models import RawDetection


COCO_LABELS: tuple[str, ...] = (
    "person", "bicycle", "car", "motorcycle", "airplane", "bus", "train", "truck",
    "boat", "traffic light", "fire hydrant", "stop sign", "parking meter", "bench",
    "bird", "cat", "dog", "horse", "sheep", "cow", "elephant", "bear", "zebra",
    "giraffe", "backpack", "umbrella", "handbag", "tie", "suitcase", "frisbee",
    "skis", "snowboard", "sports ball", "kite", "baseball bat", "baseball glove",
    "skateboard", "surfboard", "tennis racket", "bottle", "wine glass", "cup",
    "fork", "knife", "spoon", "bowl", "banana", "apple", "sandwich", "orange",
    "broccoli", "carrot", "hot dog", "pizza", "donut", "cake", "chair", "couch",
    "potted plant", "bed", "dining table", "toilet", "tv", "laptop", "mouse",
    "remote", "keyboard", "cell phone", "microwave", "oven", "toaster", "sink",
    "refrigerator", "book", "clock", "vase", "scissors", "teddy bear", "hair drier",
    "toothbrush",
)  # fmt: skip

# Ids from the original 91-category COCO annotation set that have no images.
_UNUSED_COCO_IDS = frozenset({12, 26, 29, 30, 45, 66, 68, 69, 71, 83})


def _build_coco91_map() -> dict[int, str]:
    used_ids = (i for i in range(1, 91) if i not in _UNUSED_COCO_IDS)
    return dict(zip(used_ids, COCO_LABELS, strict=True))


COCO91_LABELS: dict[int, str] = _build_coco91_map()


class Detector(Protocol):
    """Protocol for object detection backends."""

    @property
    def model_name(self) -> str:
        """Return the model identifier string."""
        ...

    def detect(self, bitmap: Bitmap, max_results: int, confidence_threshold: float) -> list[RawDetection]:
        """Detect objects in a frame.

        Args:
            bitmap: Decoded, orientation-corrected RGB frame.
            max_results: Upper bound on the number of detections returned.
            confidence_threshold: Minimum score a detection must reach.

        Returns:
            Detections after non-max suppression, in no particular order.
        """
        ...
