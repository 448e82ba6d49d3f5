"""Tests for confidence filtering and best-candidate selection."""

from __future__ import annotations

import pytest

from itemsight.vision.bitmap import BoundingBox
from itemsight.vision.models import RawDetection
from itemsight.vision.ranker import LIVE_CAPTURE_THRESHOLD, STATIC_IMAGE_THRESHOLD, DetectionRanker

_BOX = BoundingBox(x=0, y=0, width=10, height=10)


def _det(confidence: float, label: str = "cup") -> RawDetection:
    return RawDetection(label=label, confidence=confidence, bbox=_BOX)


class TestThresholds:
    def test_default_thresholds(self) -> None:
        ranker = DetectionRanker()
        assert ranker.threshold_for(is_live_capture=True) == LIVE_CAPTURE_THRESHOLD == 0.15
        assert ranker.threshold_for(is_live_capture=False) == STATIC_IMAGE_THRESHOLD == 0.25

    def test_all_below_threshold_returns_none(self) -> None:
        detections = [_det(0.1), _det(0.05), _det(0.149)]
        assert DetectionRanker().rank(detections, is_live_capture=True) is None

    def test_empty_input_returns_none(self) -> None:
        assert DetectionRanker().rank([], is_live_capture=False) is None

    def test_threshold_is_inclusive(self) -> None:
        ranked = DetectionRanker().rank([_det(0.25)], is_live_capture=False)
        assert ranked is not None
        assert ranked.confidence == 0.25

    def test_live_capture_accepts_what_static_rejects(self) -> None:
        detections = [_det(0.2)]
        ranker = DetectionRanker()
        assert ranker.rank(detections, is_live_capture=True) is not None
        assert ranker.rank(detections, is_live_capture=False) is None

    def test_custom_thresholds(self) -> None:
        ranker = DetectionRanker(live_threshold=0.5, static_threshold=0.7)
        assert ranker.rank([_det(0.6)], is_live_capture=True) is not None
        assert ranker.rank([_det(0.6)], is_live_capture=False) is None


class TestSelection:
    def test_picks_highest_confidence(self) -> None:
        detections = [_det(0.3, "book"), _det(0.9, "cup"), _det(0.6, "bottle")]
        ranked = DetectionRanker().rank(detections, is_live_capture=True)
        assert ranked is not None
        assert ranked.label == "cup"
        assert ranked.confidence == 0.9
        assert ranked.index == 1

    def test_ties_keep_first_seen(self) -> None:
        detections = [_det(0.4, "bottle"), _det(0.8, "cup"), _det(0.8, "vase")]
        ranked = DetectionRanker().rank(detections, is_live_capture=False)
        assert ranked is not None
        assert ranked.label == "cup"
        assert ranked.index == 1

    def test_below_threshold_entries_never_win(self) -> None:
        detections = [_det(0.1, "book"), _det(0.3, "cup")]
        ranked = DetectionRanker().rank(detections, is_live_capture=False)
        assert ranked is not None
        assert ranked.label == "cup"

    def test_accepts_any_iterable(self) -> None:
        ranked = DetectionRanker().rank(iter([_det(0.5), _det(0.7)]), is_live_capture=True)
        assert ranked is not None
        assert ranked.index == 1


class TestRawDetection:
    @pytest.mark.parametrize("confidence", [-0.01, 1.01])
    def test_confidence_out_of_range_rejected(self, confidence: float) -> None:
        with pytest.raises(ValueError, match="confidence"):
            _det(confidence)
