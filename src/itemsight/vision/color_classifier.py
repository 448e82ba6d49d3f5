"""Map sampled pixels to a named color using HSV rules.

The brightness bands (60/120/180/230) and hue sectors below are hand-tuned
and must stay exactly as they are; changing them needs new calibration data.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

from itemsight.vision.models import NamedColor

if TYPE_CHECKING:
    from collections.abc import Sequence

    from numpy.typing import NDArray

    from itemsight.vision.bitmap import RGB

GRAYSCALE_SATURATION: float = 0.20

# Upper bound (exclusive) of V for each grayscale band, darkest first.
_GRAY_BANDS: tuple[tuple[float, NamedColor], ...] = (
    (60, NamedColor.BLACK),
    (120, NamedColor.DARK_GRAY),
    (180, NamedColor.GRAY),
    (230, NamedColor.LIGHT_GRAY),
)


@dataclass(frozen=True)
class HSV:
    """Hue in degrees ``[0, 360)``, saturation ``[0, 1]``, value on the 0-255 scale."""

    hue: float
    saturation: float
    value: float


def median_rgb(samples: NDArray[np.uint8]) -> tuple[float, float, float]:
    """Per-channel median; even counts average the two middle values."""
    red, green, blue = np.median(samples.astype(np.float64), axis=0)
    return float(red), float(green), float(blue)


def rgb_to_hsv(red: float, green: float, blue: float) -> HSV:
    high = max(red, green, blue)
    low = min(red, green, blue)
    delta = high - low
    saturation = 0.0 if high == 0 else delta / high

    if delta == 0:
        hue = 0.0
    elif high == red:
        hue = 60.0 * (((green - blue) / delta) % 6)
    elif high == green:
        hue = 60.0 * ((blue - red) / delta + 2)
    else:
        hue = 60.0 * ((red - green) / delta + 4)
    return HSV(hue=hue % 360.0, saturation=saturation, value=high)


def classify_hsv(hsv: HSV) -> NamedColor:
    """Apply the grayscale bands, the brown override and the hue table in order."""
    hue, sat, val = hsv.hue, hsv.saturation, hsv.value

    if sat < GRAYSCALE_SATURATION:
        for upper, color in _GRAY_BANDS:
            if val < upper:
                return color
        return NamedColor.WHITE

    if 0 <= hue < 45 and val < 120 and sat > 0.30:
        return NamedColor.BROWN

    if hue >= 345 or hue < 15:
        return NamedColor.PINK if val > 200 and sat < 0.5 else NamedColor.RED
    if hue < 45:
        return NamedColor.ORANGE if val > 180 else NamedColor.DARK_ORANGE
    if hue < 75:
        return NamedColor.YELLOW
    if hue < 90:
        return NamedColor.YELLOW_GREEN
    if hue < 120:
        return NamedColor.LIGHT_GREEN if val > 180 else NamedColor.GREEN
    if hue < 165:
        return NamedColor.DARK_GREEN
    if hue < 195:
        return NamedColor.CYAN
    if hue < 255:
        return NamedColor.LIGHT_BLUE if val > 180 else NamedColor.BLUE
    if hue < 285:
        return NamedColor.PURPLE
    if hue < 315:
        return NamedColor.MAGENTA
    return NamedColor.PINK


@dataclass(frozen=True)
class ColorClassifier:
    """Name the dominant color of a set of RGB samples."""

    def classify(self, samples: Sequence[RGB] | NDArray[np.uint8]) -> NamedColor:
        pixels = np.asarray(samples, dtype=np.uint8).reshape(-1, 3)
        if len(pixels) == 0:
            return NamedColor.UNKNOWN
        return classify_hsv(rgb_to_hsv(*median_rgb(pixels)))
