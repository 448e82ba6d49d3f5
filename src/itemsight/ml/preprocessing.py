"""Image decoding: uploaded bytes to an orientation-corrected RGB Bitmap."""

from __future__ import annotations

import io
import logging
from typing import TYPE_CHECKING

import numpy as np
from PIL import Image, ImageOps, UnidentifiedImageError

from itemsight.vision.bitmap import Bitmap

if TYPE_CHECKING:
    from itemsight.config import Settings

logger = logging.getLogger(__name__)


class ImageTooLargeError(ValueError):
    """Raised when an upload exceeds the configured byte or pixel limits."""


class ImageDecoder:
    """Decode JPEG/PNG/WebP (anything Pillow reads) into a Bitmap."""

    def __init__(self, max_image_pixels: int, max_file_size: int) -> None:
        self._max_image_pixels = max_image_pixels
        self._max_file_size = max_file_size

    @classmethod
    def from_settings(cls, settings: Settings) -> ImageDecoder:
        return cls(max_image_pixels=settings.max_image_pixels, max_file_size=settings.max_file_size)

    def decode(self, image_bytes: bytes) -> Bitmap:
        """Decode raw image bytes.

        EXIF orientation is applied and alpha/palette/grayscale images are
        converted to plain RGB.

        Raises:
            ImageTooLargeError: If the file or the decoded image exceeds the limits.
            ValueError: If the bytes are empty or not a readable image.
        """
        if not image_bytes:
            raise ValueError("Empty image upload")
        if len(image_bytes) > self._max_file_size:
            raise ImageTooLargeError(f"Image file is {len(image_bytes)} bytes, limit is {self._max_file_size}")

        try:
            with Image.open(io.BytesIO(image_bytes)) as img:
                pixels = img.width * img.height
                if pixels > self._max_image_pixels:
                    raise ImageTooLargeError(f"Image has {pixels} pixels, limit is {self._max_image_pixels}")
                upright = ImageOps.exif_transpose(img)
                rgb = upright.convert("RGB")
        except Image.DecompressionBombError as exc:
            raise ImageTooLargeError(f"Image exceeds the decoder safety limit: {exc}") from exc
        except UnidentifiedImageError as exc:
            raise ValueError("Unsupported or corrupt image data") from exc
        except OSError as exc:
            raise ValueError(f"Unable to decode image: {exc}") from exc

        logger.debug("Decoded %dx%d image", rgb.width, rgb.height)
        return Bitmap.from_array(np.asarray(rgb, dtype=np.uint8))
