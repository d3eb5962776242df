"""
Voucher Image Payloads

The ledger core treats voucher images as opaque strings. This module sits
at the upload boundary and turns raw image bytes into the payload that
gets stored (a base64 data URI), and back.

DESIGN DECISION: We check uploads with Pillow before encoding them:
1. A file that is not an image never reaches the ledger document
2. The stored MIME type comes from the image itself, not the file name
3. Oversized photos are rejected instead of bloating every save
"""

import base64
import binascii
from io import BytesIO
from typing import Optional

from PIL import Image, UnidentifiedImageError

from ledger.config import get_settings


class VoucherError(Exception):
    """Base exception for voucher payload errors."""
    pass


class UnsupportedVoucherError(VoucherError):
    """The bytes are not an image, or not an allowed image format."""
    pass


class VoucherTooLargeError(VoucherError):
    """The image is over the configured size limit."""
    pass


DATA_URI_PREFIX = "data:"
BASE64_MARKER = ";base64,"


def _detect_mime_type(image_bytes: bytes) -> str:
    """Open the image with Pillow and return its MIME type."""
    allowed = get_settings().voucher.allowed_formats_list
    try:
        with Image.open(BytesIO(image_bytes)) as img:
            img.verify()
            image_format = img.format
    except (UnidentifiedImageError, OSError, SyntaxError) as e:
        raise UnsupportedVoucherError(f"Voucher is not a readable image: {e}")

    if image_format is None or image_format.upper() not in allowed:
        raise UnsupportedVoucherError(
            f"Unsupported voucher format: {image_format}. Allowed: {', '.join(allowed)}"
        )
    return Image.MIME.get(image_format.upper(), f"image/{image_format.lower()}")


def encode_voucher(image_bytes: bytes, mime_type: Optional[str] = None) -> str:
    """
    Turn uploaded image bytes into a storable data URI.

    Args:
        image_bytes: Raw file contents
        mime_type: Declared type from the uploader; ignored in favor of
                   the type Pillow detects

    Raises:
        VoucherTooLargeError: If the file exceeds the configured limit
        UnsupportedVoucherError: If Pillow cannot read it or the format
                                 is not allowed
    """
    max_bytes = get_settings().voucher.max_size_bytes
    if len(image_bytes) > max_bytes:
        raise VoucherTooLargeError(
            f"Voucher is {len(image_bytes)} bytes, limit is {max_bytes} bytes"
        )

    detected = _detect_mime_type(image_bytes)
    encoded = base64.b64encode(image_bytes).decode("ascii")
    return f"{DATA_URI_PREFIX}{detected}{BASE64_MARKER}{encoded}"


def is_data_uri(payload: str) -> bool:
    """Whether a stored payload is a base64 data URI."""
    return payload.startswith(DATA_URI_PREFIX) and BASE64_MARKER in payload


def decode_voucher(payload: str) -> tuple[str, bytes]:
    """
    Split a stored data URI back into (mime_type, bytes).

    Raises:
        VoucherError: If the payload is not a base64 data URI
    """
    if not is_data_uri(payload):
        raise VoucherError("Voucher payload is not a base64 data URI")

    header, _, body = payload.partition(BASE64_MARKER)
    mime_type = header[len(DATA_URI_PREFIX):] or "application/octet-stream"
    try:
        return mime_type, base64.b64decode(body, validate=True)
    except (binascii.Error, ValueError) as e:
        raise VoucherError(f"Voucher payload has invalid base64 data: {e}")
