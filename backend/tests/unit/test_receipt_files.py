import io

from PIL import Image
import pytest

from tests.helpers.builders import make_image_bytes
from tutorhub.core.receipt_files import (
    ReceiptFileRejected,
    build_preview,
    detect_receipt_kind,
)


def test_png_is_an_image(png_bytes):
    kind = detect_receipt_kind(png_bytes, "image/png")
    assert kind.is_image
    assert kind.content_type == "image/png"


def test_content_type_comes_from_the_bytes():
    jpeg = make_image_bytes(fmt="JPEG")
    kind = detect_receipt_kind(jpeg, "image/png")
    assert kind.content_type == "image/jpeg"


def test_pdf_detected_by_magic(pdf_bytes):
    kind = detect_receipt_kind(pdf_bytes, "application/pdf")
    assert not kind.is_image
    assert kind.content_type == "application/pdf"


def test_pdf_without_declared_type(pdf_bytes):
    assert detect_receipt_kind(pdf_bytes).content_type == "application/pdf"


def test_empty_file_rejected():
    with pytest.raises(ReceiptFileRejected, match="empty"):
        detect_receipt_kind(b"", "image/png")


def test_oversized_file_rejected():
    with pytest.raises(ReceiptFileRejected, match="less than 10MB"):
        detect_receipt_kind(b"x" * (10 * 1024 * 1024 + 1), "image/png", max_bytes=10 * 1024 * 1024)


def test_wrong_declared_type_rejected(pdf_bytes):
    with pytest.raises(ReceiptFileRejected, match="image or PDF"):
        detect_receipt_kind(pdf_bytes, "text/plain")


def test_garbage_claiming_to_be_an_image_rejected():
    with pytest.raises(ReceiptFileRejected, match="image or PDF"):
        detect_receipt_kind(b"definitely not a png", "image/png")


def test_preview_is_a_small_png():
    preview = build_preview(make_image_bytes(size=(1200, 800)))
    with Image.open(io.BytesIO(preview)) as img:
        assert img.format == "PNG"
        assert max(img.size) <= 200
