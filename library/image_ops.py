"""Image manipulation utilities.

This module wraps the few Pillow operations the studio needs: checking that
an upload really is an image, decoding data URLs and producing thumbnails for
the gallery view.
"""

from __future__ import annotations

import base64
import binascii
from io import BytesIO
from typing import Optional

from PIL import Image, UnidentifiedImageError  # type: ignore[import]

from library.errors import InvalidImageError
from library.models import UploadedImage

THUMBNAIL_SIZE = 256


def _open_image(data: bytes) -> Image.Image:
    """Open raw image bytes with Pillow and convert to RGB."""
    img = Image.open(BytesIO(data))
    if img.mode != "RGB":
        img = img.convert("RGB")
    return img


def read_upload(data: bytes, content_type: Optional[str] = None) -> UploadedImage:
    """Validate an uploaded file and stage it as an ``UploadedImage``.

    The declared content type must be an ``image/*`` type when given, and the
    bytes must be readable by Pillow. When the declared type is missing the
    media type is taken from the decoded format.

    Args:
        data: Raw file bytes.
        content_type: Media type declared by the client, if any.

    Returns:
        The staged image.

    Raises:
        InvalidImageError: If the file is empty or not an image.
    """
    if content_type and not content_type.startswith("image/"):
        raise InvalidImageError("Please select a valid image file.")
    if not data:
        raise InvalidImageError("Please select a valid image file.")
    try:
        with Image.open(BytesIO(data)) as img:
            detected = Image.MIME.get(img.format or "")
    except (UnidentifiedImageError, OSError):
        raise InvalidImageError("Failed to read the image file.")
    mime_type = content_type or detected
    if not mime_type:
        raise InvalidImageError("Please select a valid image file.")
    return UploadedImage(data=data, mime_type=mime_type)


def decode_data_url(data_url: str) -> UploadedImage:
    """Turn ``data:image/png;base64,AAAA...`` into an ``UploadedImage``."""
    header, sep, b64 = data_url.partition(",")
    if not sep or not header.startswith("data:"):
        raise InvalidImageError("Expected a base64 data URL.")
    mime_type = header[len("data:"):].split(";", 1)[0]
    try:
        data = base64.b64decode(b64, validate=True)
    except (binascii.Error, ValueError):
        raise InvalidImageError("Data URL is not valid base64.")
    return read_upload(data, mime_type or None)


def resize_image(data: bytes, max_size: int = THUMBNAIL_SIZE) -> bytes:
    """Resize an image so that its largest dimension equals `max_size`.

    Args:
        data: Raw image bytes.
        max_size: Maximum width/height for the output image.

    Returns:
        The resized image as JPEG bytes.
    """
    img = _open_image(data)
    img.thumbnail((max_size, max_size), Image.LANCZOS)
    buffer = BytesIO()
    img.save(buffer, format="JPEG", quality=85)
    return buffer.getvalue()
