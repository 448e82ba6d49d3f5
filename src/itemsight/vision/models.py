"""Detection value types shared by the ranking, color and pipeline stages."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from itemsight.vision.bitmap import BoundingBox

UNKNOWN_LABEL = "Unknown"


class NamedColor(StrEnum):
    """Closed palette of human-readable color names."""

    BLACK = "Black"
    DARK_GRAY = "DarkGray"
    GRAY = "Gray"
    LIGHT_GRAY = "LightGray"
    WHITE = "White"
    RED = "Red"
    PINK = "Pink"
    ORANGE = "Orange"
    DARK_ORANGE = "DarkOrange"
    BROWN = "Brown"
    YELLOW = "Yellow"
    YELLOW_GREEN = "YellowGreen"
    GREEN = "Green"
    LIGHT_GREEN = "LightGreen"
    DARK_GREEN = "DarkGreen"
    CYAN = "Cyan"
    BLUE = "Blue"
    LIGHT_BLUE = "LightBlue"
    PURPLE = "Purple"
    MAGENTA = "Magenta"
    UNKNOWN = "Unknown"


@dataclass(frozen=True)
class RawDetection:
    """One unsorted detector candidate."""

    label: str
    confidence: float
    bbox: BoundingBox

    def __post_init__(self) -> None:
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"Detection confidence must be within [0, 1], got {self.confidence}")


@dataclass(frozen=True)
class RankedDetection:
    """The best candidate of a batch, with its position in the input sequence."""

    detection: RawDetection
    index: int

    @property
    def label(self) -> str:
        return self.detection.label

    @property
    def confidence(self) -> float:
        return self.detection.confidence

    @property
    def bbox(self) -> BoundingBox:
        return self.detection.bbox


@dataclass(frozen=True)
class DetectionResult:
    """Final label and color for one frame."""

    item_label: str
    color_name: NamedColor
    confidence: float

    @classmethod
    def unknown(cls) -> DetectionResult:
        """Result used when no detection clears the confidence threshold."""
        return cls(item_label=UNKNOWN_LABEL, color_name=NamedColor.UNKNOWN, confidence=0.0)

    @property
    def is_fallback(self) -> bool:
        return self.item_label == UNKNOWN_LABEL and self.confidence == 0.0

    def is_low_confidence(self, threshold: float = 0.5) -> bool:
        """Whether the user should be prompted to recapture the frame."""
        return self.confidence < threshold
