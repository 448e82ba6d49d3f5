"""Pixel sampling inside a detected object's region."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

from itemsight.vision.bitmap import BoundingBox

if TYPE_CHECKING:
    from numpy.typing import NDArray

    from itemsight.vision.bitmap import Bitmap

SAMPLE_STRIDE: int = 8
INSET_FRACTION: float = 0.2
MIN_BRIGHTNESS: int = 20
MAX_BRIGHTNESS: int = 240


def center_region(width: int, height: int) -> BoundingBox:
    """Central 50% x 50% of an image, used when no usable box is known."""
    return BoundingBox(x=width // 4, y=height // 4, width=width // 2, height=height // 2)


@dataclass(frozen=True)
class ColorSampler:
    """Collect object pixels from the middle of a box, skipping shadows and glare.

    The box is clamped to the image and inset by 20% on every side, pixels are
    read on a fixed 8-pixel grid, and only pixels whose mean channel value lies
    strictly between 20 and 240 are kept.
    """

    stride: int = SAMPLE_STRIDE
    inset: float = INSET_FRACTION

    def resolve_region(self, bitmap: Bitmap, region: BoundingBox | None) -> BoundingBox:
        """Clamp ``region`` to the bitmap, falling back to the center when it is empty."""
        if region is not None:
            clamped = region.clamp(bitmap.width, bitmap.height)
            if clamped.area > 0:
                return clamped
        return center_region(bitmap.width, bitmap.height)

    def sample(self, bitmap: Bitmap, region: BoundingBox | None) -> NDArray[np.uint8]:
        """Return kept pixels as an Nx3 uint8 array in row-major scan order."""
        box = self.resolve_region(bitmap, region)
        inset_x = int(box.width * self.inset)
        inset_y = int(box.height * self.inset)
        left, right = box.x + inset_x, box.x + box.width - inset_x
        top, bottom = box.y + inset_y, box.y + box.height - inset_y

        grid = bitmap.to_array()[top:bottom:self.stride, left:right:self.stride].reshape(-1, 3)
        # Compare channel sums against 3x the bounds so no rounding is involved.
        totals = grid.sum(axis=1, dtype=np.int32)
        keep = (totals > MIN_BRIGHTNESS * 3) & (totals < MAX_BRIGHTNESS * 3)
        return grid[keep]
