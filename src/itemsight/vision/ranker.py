"""Confidence filtering and best-candidate selection for raw detections."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from itemsight.vision.models import RankedDetection

if TYPE_CHECKING:
    from collections.abc import Iterable

    from itemsight.vision.models import RawDetection

LIVE_CAPTURE_THRESHOLD: float = 0.15
STATIC_IMAGE_THRESHOLD: float = 0.25


@dataclass(frozen=True)
class DetectionRanker:
    """Pick the single most confident detection that clears the source threshold.

    Handheld camera frames are noisier, so live captures use a lower bar than
    static images.
    """

    live_threshold: float = LIVE_CAPTURE_THRESHOLD
    static_threshold: float = STATIC_IMAGE_THRESHOLD

    def threshold_for(self, is_live_capture: bool) -> float:
        return self.live_threshold if is_live_capture else self.static_threshold

    def rank(self, detections: Iterable[RawDetection], is_live_capture: bool) -> RankedDetection | None:
        """Return the highest-confidence candidate, or None if nothing qualifies.

        Candidates need ``confidence >= threshold``. Ties keep the earliest
        candidate in input order.
        """
        threshold = self.threshold_for(is_live_capture)
        best: RankedDetection | None = None
        for index, detection in enumerate(detections):
            if detection.confidence < threshold:
                continue
            if best is None or detection.confidence > best.confidence:
                best = RankedDetection(detection=detection, index=index)
        return best
