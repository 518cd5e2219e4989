"""
Receipt file checks shared by the upload route and the payment form.

A receipt is either an image Pillow can decode or a PDF. The declared
content type is only a hint; the bytes decide.
"""

from __future__ import annotations

from dataclasses import dataclass
import io
import logging
from typing import Optional

from PIL import Image, ImageOps, UnidentifiedImageError

from .constants import MAX_RECEIPT_BYTES, RECEIPT_PDF_CONTENT_TYPE, RECEIPT_PREVIEW_SIZE

logger = logging.getLogger(__name__)

PDF_MAGIC = b"%PDF-"

_PIL_CONTENT_TYPES = {
    "JPEG": "image/jpeg",
    "PNG": "image/png",
    "GIF": "image/gif",
    "WEBP": "image/webp",
    "BMP": "image/bmp",
    "TIFF": "image/tiff",
}


class ReceiptFileRejected(ValueError):
    """The file is not an acceptable receipt."""


@dataclass(frozen=True)
class ReceiptKind:
    content_type: str
    is_image: bool


def _format_size(num_bytes: int) -> str:
    return f"{num_bytes / (1024 * 1024):.0f}MB"


def detect_receipt_kind(
    data: bytes,
    declared_content_type: Optional[str] = None,
    *,
    max_bytes: int = MAX_RECEIPT_BYTES,
) -> ReceiptKind:
    """
    Classify ``data`` as an image or PDF receipt.

    Raises:
        ReceiptFileRejected: If the file is empty, too large, or neither an image nor a PDF
    """
    if not data:
        raise ReceiptFileRejected("File is empty")
    if len(data) > max_bytes:
        raise ReceiptFileRejected(f"File size must be less than {_format_size(max_bytes)}")

    declared = (declared_content_type or "").split(";")[0].strip().lower()
    if declared and not (declared.startswith("image/") or declared == RECEIPT_PDF_CONTENT_TYPE):
        raise ReceiptFileRejected("Please upload an image or PDF file")

    if data.startswith(PDF_MAGIC):
        return ReceiptKind(content_type=RECEIPT_PDF_CONTENT_TYPE, is_image=False)

    try:
        with Image.open(io.BytesIO(data)) as img:
            img.verify()
            image_format = img.format or ""
    except (UnidentifiedImageError, OSError, SyntaxError) as exc:
        logger.debug("Receipt is not a decodable image: %s", exc)
        raise ReceiptFileRejected("Please upload an image or PDF file") from None

    content_type = _PIL_CONTENT_TYPES.get(image_format.upper(), declared or "image/octet-stream")
    return ReceiptKind(content_type=content_type, is_image=True)


def build_preview(data: bytes, size: tuple[int, int] = RECEIPT_PREVIEW_SIZE) -> bytes:
    """PNG thumbnail for an image receipt."""
    with Image.open(io.BytesIO(data)) as img:
        thumb = ImageOps.exif_transpose(img) or img
        thumb = thumb.convert("RGBA")
        thumb.thumbnail(size, Image.LANCZOS)
        out = io.BytesIO()
        thumb.save(out, format="PNG", optimize=True)
        return out.getvalue()
