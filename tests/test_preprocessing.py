"""Tests for upload decoding into Bitmaps."""

from __future__ import annotations

import io

import pytest
from PIL import Image

from itemsight.ml.preprocessing import ImageDecoder, ImageTooLargeError


def _encode(img: Image.Image, fmt: str = "PNG", **save_kwargs: object) -> bytes:
    buf = io.BytesIO()
    img.save(buf, format=fmt, **save_kwargs)
    return buf.getvalue()


def _bomb_png() -> bytes:
    """A 1-bit PNG whose pixel count exceeds Pillow's own decompression-bomb limit."""
    return _encode(Image.new("1", (14000, 13000)))


def _decoder(**overrides: int) -> ImageDecoder:
    limits = {"max_image_pixels": 1_000_000, "max_file_size": 10_000_000}
    limits.update(overrides)
    return ImageDecoder(**limits)


class TestImageDecoder:
    def test_decodes_png_to_rgb_bitmap(self) -> None:
        bitmap = _decoder().decode(_encode(Image.new("RGB", (4, 3), (10, 20, 30))))
        assert (bitmap.width, bitmap.height) == (4, 3)
        assert bitmap.data == bytes((10, 20, 30)) * 12

    def test_drops_alpha_channel(self) -> None:
        bitmap = _decoder().decode(_encode(Image.new("RGBA", (2, 2), (200, 30, 30, 128))))
        assert bitmap.data == bytes((200, 30, 30)) * 4

    def test_converts_grayscale(self) -> None:
        bitmap = _decoder().decode(_encode(Image.new("L", (2, 1), 134)))
        assert bitmap.data == bytes((134, 134, 134)) * 2

    def test_applies_exif_orientation(self) -> None:
        img = Image.new("RGB", (4, 2), (0, 0, 200))
        exif = img.getexif()
        exif[0x0112] = 6  # rotate 90 degrees clockwise for display
        bitmap = _decoder().decode(_encode(img, "JPEG", exif=exif))
        assert (bitmap.width, bitmap.height) == (2, 4)

    def test_rejects_empty_upload(self) -> None:
        with pytest.raises(ValueError, match="Empty"):
            _decoder().decode(b"")

    def test_rejects_garbage(self) -> None:
        with pytest.raises(ValueError, match="Unsupported or corrupt"):
            _decoder().decode(b"definitely not an image")

    def test_rejects_oversized_file(self) -> None:
        data = _encode(Image.new("RGB", (4, 4)))
        with pytest.raises(ImageTooLargeError, match="bytes"):
            _decoder(max_file_size=len(data) - 1).decode(data)

    def test_rejects_too_many_pixels(self) -> None:
        data = _encode(Image.new("RGB", (10, 10)))
        with pytest.raises(ImageTooLargeError, match="pixels"):
            _decoder(max_image_pixels=99).decode(data)

    def test_too_large_is_value_error(self) -> None:
        assert issubclass(ImageTooLargeError, ValueError)

    def test_decompression_bomb_is_too_large(self) -> None:
        data = _bomb_png()
        decoder = _decoder(max_image_pixels=16_777_216, max_file_size=52_428_800)
        assert len(data) < 52_428_800
        with pytest.raises(ImageTooLargeError, match="safety limit"):
            decoder.decode(data)
