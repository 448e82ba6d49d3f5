"""Tests for the frame classification pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field

import pytest

from itemsight.vision.bitmap import Bitmap, BoundingBox
from itemsight.vision.models import DetectionResult, NamedColor, RawDetection
from itemsight.vision.pipeline import DetectionPipeline, PipelineStats
from itemsight.vision.ranker import DetectionRanker

_CUP_BOX = BoundingBox(x=10, y=10, width=80, height=80)


@dataclass
class RecordingDetector:
    """Detector stand-in returning fixed detections and remembering its calls."""

    detections: list[RawDetection]
    calls: list[tuple[int, float]] = field(default_factory=list)

    @property
    def model_name(self) -> str:
        return "recording"

    def detect(self, bitmap: Bitmap, max_results: int, confidence_threshold: float) -> list[RawDetection]:
        self.calls.append((max_results, confidence_threshold))
        return list(self.detections)


class TestClassifyFrame:
    def test_end_to_end_red_cup(self) -> None:
        bitmap = Bitmap.filled(100, 100, (200, 30, 30))
        detections = [RawDetection(label="cup", confidence=0.8, bbox=_CUP_BOX)]

        result = DetectionPipeline().classify_frame(bitmap, detections, is_live_capture=True)

        assert result == DetectionResult(item_label="cup", color_name=NamedColor.RED, confidence=0.8)

    def test_no_detection_returns_unknown_fallback(self) -> None:
        bitmap = Bitmap.filled(100, 100, (200, 30, 30))
        detections = [RawDetection(label="cup", confidence=0.2, bbox=_CUP_BOX)]

        result = DetectionPipeline().classify_frame(bitmap, detections, is_live_capture=False)

        assert result == DetectionResult(item_label="Unknown", color_name=NamedColor.UNKNOWN, confidence=0.0)
        assert result.is_fallback

    def test_best_detection_region_drives_color(self) -> None:
        bitmap = Bitmap.filled(100, 100, (0, 0, 150))
        detections = [
            RawDetection(label="book", confidence=0.4, bbox=BoundingBox(x=0, y=0, width=50, height=50)),
            RawDetection(label="bottle", confidence=0.7, bbox=_CUP_BOX),
        ]
        result = DetectionPipeline().classify_frame(bitmap, detections, is_live_capture=True)
        assert result.item_label == "bottle"
        assert result.color_name == NamedColor.BLUE

    def test_dark_object_keeps_label_with_unknown_color(self) -> None:
        bitmap = Bitmap.filled(100, 100, (5, 5, 5))
        detections = [RawDetection(label="tv", confidence=0.9, bbox=_CUP_BOX)]

        result = DetectionPipeline().classify_frame(bitmap, detections, is_live_capture=True)

        assert result.item_label == "tv"
        assert result.color_name == NamedColor.UNKNOWN
        assert not result.is_fallback

    def test_out_of_bounds_box_samples_image_center(self) -> None:
        bitmap = Bitmap.filled(100, 100, (0, 200, 200))
        detections = [RawDetection(label="vase", confidence=0.5, bbox=BoundingBox(x=200, y=200, width=10, height=10))]

        result = DetectionPipeline().classify_frame(bitmap, detections, is_live_capture=True)

        assert result.color_name == NamedColor.CYAN


class TestDetectAndClassify:
    def test_passes_live_threshold_and_max_results(self) -> None:
        detector = RecordingDetector([RawDetection(label="cup", confidence=0.8, bbox=_CUP_BOX)])
        pipeline = DetectionPipeline(detector, max_results=5)

        result = pipeline.detect_and_classify(Bitmap.filled(100, 100, (200, 30, 30)), is_live_capture=True)

        assert detector.calls == [(5, 0.15)]
        assert result.item_label == "cup"

    def test_static_capture_uses_static_threshold(self) -> None:
        detector = RecordingDetector([])
        pipeline = DetectionPipeline(detector, ranker=DetectionRanker(static_threshold=0.4))

        result = pipeline.detect_and_classify(Bitmap.filled(10, 10, (0, 0, 0)), is_live_capture=False)

        assert detector.calls == [(10, 0.4)]
        assert result.is_fallback

    def test_requires_detector(self) -> None:
        with pytest.raises(RuntimeError, match="no detector"):
            DetectionPipeline().detect_and_classify(Bitmap.filled(10, 10, (0, 0, 0)), is_live_capture=True)


class TestPipelineStats:
    def test_counts_frames_fallbacks_and_colors(self) -> None:
        pipeline = DetectionPipeline()
        bitmap = Bitmap.filled(100, 100, (200, 30, 30))

        pipeline.classify_frame(bitmap, [RawDetection(label="cup", confidence=0.8, bbox=_CUP_BOX)], True)
        pipeline.classify_frame(bitmap, [RawDetection(label="cup", confidence=0.3, bbox=_CUP_BOX)], True)
        pipeline.classify_frame(bitmap, [], True)

        stats = pipeline.stats.snapshot()
        assert stats.frames == 3
        assert stats.fallbacks == 1
        assert stats.low_confidence == 1
        assert stats.colors == {"Red": 2}

    def test_low_confidence_threshold_is_configurable(self) -> None:
        stats = PipelineStats(low_confidence_threshold=0.9)
        stats.record(DetectionResult(item_label="cup", color_name=NamedColor.RED, confidence=0.8))
        assert stats.snapshot().low_confidence == 1


class TestDetectionResult:
    def test_low_confidence_below_half(self) -> None:
        assert DetectionResult("cup", NamedColor.RED, 0.49).is_low_confidence()
        assert not DetectionResult("cup", NamedColor.RED, 0.5).is_low_confidence()

    def test_result_is_immutable(self) -> None:
        result = DetectionResult.unknown()
        with pytest.raises(AttributeError):
            result.confidence = 1.0  # type: ignore[misc]
