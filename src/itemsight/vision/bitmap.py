"""Decoded RGB frames and pixel-space bounding boxes."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from numpy.typing import NDArray

RGB = tuple[int, int, int]


class MalformedBitmapError(ValueError):
    """Raised when a bitmap's dimensions disagree with its pixel buffer."""


@dataclass(frozen=True)
class Bitmap:
    """Immutable row-major buffer of interleaved RGB bytes (no alpha)."""

    width: int
    height: int
    data: bytes

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise MalformedBitmapError(f"Bitmap dimensions must be positive, got {self.width}x{self.height}")
        expected = self.width * self.height * 3
        if len(self.data) != expected:
            raise MalformedBitmapError(
                f"Bitmap buffer has {len(self.data)} bytes, expected {expected} for {self.width}x{self.height} RGB"
            )

    @classmethod
    def from_array(cls, array: NDArray[np.uint8]) -> Bitmap:
        """Build a bitmap from an HxWx3 uint8 array."""
        if array.ndim != 3 or array.shape[2] != 3:
            raise MalformedBitmapError(f"Expected an HxWx3 array, got shape {array.shape}")
        height, width = array.shape[:2]
        return cls(width=width, height=height, data=np.ascontiguousarray(array, dtype=np.uint8).tobytes())

    @classmethod
    def filled(cls, width: int, height: int, color: RGB) -> Bitmap:
        """Build a bitmap where every pixel has the same color."""
        return cls(width=width, height=height, data=bytes(color) * (width * height))

    def to_array(self) -> NDArray[np.uint8]:
        """Return a read-only HxWx3 view over the pixel buffer."""
        return np.frombuffer(self.data, dtype=np.uint8).reshape(self.height, self.width, 3)


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned box in pixel units, anchored at its top-left corner."""

    x: int
    y: int
    width: int
    height: int

    @property
    def area(self) -> int:
        return max(self.width, 0) * max(self.height, 0)

    def clamp(self, image_width: int, image_height: int) -> BoundingBox:
        """Intersect the box with ``[0, image_width) x [0, image_height)``.

        The result has zero area when the box lies entirely outside the image.
        """
        left = min(max(self.x, 0), image_width)
        top = min(max(self.y, 0), image_height)
        right = min(max(self.x + self.width, left), image_width)
        bottom = min(max(self.y + self.height, top), image_height)
        return BoundingBox(x=left, y=top, width=right - left, height=bottom - top)
