"""Tests for the Bitmap buffer and BoundingBox helpers."""

from __future__ import annotations

import numpy as np
import pytest

from itemsight.vision.bitmap import Bitmap, BoundingBox, MalformedBitmapError


class TestBitmap:
    def test_buffer_length_must_match_dimensions(self) -> None:
        with pytest.raises(MalformedBitmapError, match="expected 12"):
            Bitmap(width=2, height=2, data=b"\x00" * 11)

    @pytest.mark.parametrize(("width", "height"), [(0, 4), (4, 0), (-1, 3)])
    def test_dimensions_must_be_positive(self, width: int, height: int) -> None:
        with pytest.raises(MalformedBitmapError):
            Bitmap(width=width, height=height, data=b"")

    def test_malformed_bitmap_is_value_error(self) -> None:
        assert issubclass(MalformedBitmapError, ValueError)

    def test_array_round_trip_preserves_layout(self) -> None:
        array = np.arange(2 * 3 * 3, dtype=np.uint8).reshape(2, 3, 3)
        bitmap = Bitmap.from_array(array)
        assert (bitmap.width, bitmap.height) == (3, 2)
        np.testing.assert_array_equal(bitmap.to_array(), array)

    def test_from_array_rejects_alpha(self) -> None:
        with pytest.raises(MalformedBitmapError, match="HxWx3"):
            Bitmap.from_array(np.zeros((2, 2, 4), dtype=np.uint8))

    def test_array_view_is_read_only(self) -> None:
        view = Bitmap.filled(2, 2, (1, 2, 3)).to_array()
        with pytest.raises(ValueError):
            view[0, 0, 0] = 9

    def test_filled_sets_every_pixel(self) -> None:
        bitmap = Bitmap.filled(3, 2, (200, 30, 30))
        assert bitmap.data == bytes((200, 30, 30)) * 6


class TestBoundingBox:
    def test_area(self) -> None:
        assert BoundingBox(x=1, y=1, width=4, height=5).area == 20
        assert BoundingBox(x=1, y=1, width=-4, height=5).area == 0

    def test_clamp_inside_is_identity(self) -> None:
        box = BoundingBox(x=10, y=10, width=80, height=80)
        assert box.clamp(100, 100) == box

    def test_clamp_trims_overflow(self) -> None:
        assert BoundingBox(x=90, y=-5, width=30, height=20).clamp(100, 100) == BoundingBox(
            x=90, y=0, width=10, height=15
        )

    def test_clamp_outside_has_zero_area(self) -> None:
        assert BoundingBox(x=-30, y=10, width=20, height=20).clamp(100, 100).area == 0
        assert BoundingBox(x=120, y=10, width=20, height=20).clamp(100, 100).area == 0
