"""Frame classification: rank detections, sample the winning box, name its color."""

from __future__ import annotations

import logging
import threading
from collections import Counter
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from itemsight.vision.color_classifier import ColorClassifier
from itemsight.vision.color_sampler import ColorSampler
from itemsight.vision.models import DetectionResult
from itemsight.vision.ranker import DetectionRanker

if TYPE_CHECKING:
    from collections.abc import Sequence

    from itemsight.ml.detector import Detector
    from itemsight.vision.bitmap import Bitmap
    from itemsight.vision.models import RawDetection

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StatsSnapshot:
    frames: int
    fallbacks: int
    low_confidence: int
    colors: dict[str, int]


@dataclass
class PipelineStats:
    """Thread-safe counters recorded once per classified frame."""

    low_confidence_threshold: float = 0.5
    _frames: int = 0
    _fallbacks: int = 0
    _low_confidence: int = 0
    _colors: Counter[str] = field(default_factory=Counter)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def record(self, result: DetectionResult) -> None:
        with self._lock:
            self._frames += 1
            if result.is_fallback:
                self._fallbacks += 1
                return
            if result.is_low_confidence(self.low_confidence_threshold):
                self._low_confidence += 1
            self._colors[result.color_name.value] += 1

    def snapshot(self) -> StatsSnapshot:
        with self._lock:
            return StatsSnapshot(
                frames=self._frames,
                fallbacks=self._fallbacks,
                low_confidence=self._low_confidence,
                colors=dict(self._colors),
            )


class DetectionPipeline:
    """Turn a frame and its raw detections into one labeled, colored result.

    The ranker, sampler and classifier are immutable, so one pipeline can be
    shared by concurrent requests. Only ``stats`` is mutated, under its lock.
    """

    def __init__(
        self,
        detector: Detector | None = None,
        *,
        ranker: DetectionRanker | None = None,
        sampler: ColorSampler | None = None,
        classifier: ColorClassifier | None = None,
        max_results: int = 10,
        stats: PipelineStats | None = None,
    ) -> None:
        self._detector = detector
        self.ranker = ranker or DetectionRanker()
        self.sampler = sampler or ColorSampler()
        self.classifier = classifier or ColorClassifier()
        self.max_results = max_results
        self.stats = stats or PipelineStats()

    @property
    def detector(self) -> Detector | None:
        return self._detector

    def classify_frame(
        self,
        bitmap: Bitmap,
        raw_detections: Sequence[RawDetection],
        is_live_capture: bool,
    ) -> DetectionResult:
        """Rank ``raw_detections`` and classify the color of the best one.

        Returns ``DetectionResult.unknown()`` when nothing clears the threshold.
        """
        ranked = self.ranker.rank(raw_detections, is_live_capture)
        if ranked is None:
            logger.info(
                "No detection above %.2f among %d candidates",
                self.ranker.threshold_for(is_live_capture),
                len(raw_detections),
            )
            result = DetectionResult.unknown()
        else:
            samples = self.sampler.sample(bitmap, ranked.bbox)
            color = self.classifier.classify(samples)
            result = DetectionResult(item_label=ranked.label, color_name=color, confidence=ranked.confidence)
            logger.info(
                "Classified %s (%s, confidence=%.3f, samples=%d)",
                result.item_label,
                result.color_name,
                result.confidence,
                len(samples),
            )

        self.stats.record(result)
        return result

    def detect_and_classify(self, bitmap: Bitmap, is_live_capture: bool) -> DetectionResult:
        """Run the detector on ``bitmap`` and classify the outcome.

        Raises:
            RuntimeError: If the pipeline was built without a detector.
        """
        if self._detector is None:
            raise RuntimeError("DetectionPipeline has no detector configured")

        threshold = self.ranker.threshold_for(is_live_capture)
        detections = self._detector.detect(bitmap, self.max_results, threshold)
        logger.debug("%s returned %d detections", self._detector.model_name, len(detections))
        return self.classify_frame(bitmap, detections, is_live_capture)
