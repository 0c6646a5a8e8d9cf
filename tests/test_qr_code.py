import pytest
from qrcode.exceptions import DataOverflowError

from services.qr_code import build_qr_png, build_qr_svg

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


def test_png():
    assert build_qr_png("hello").startswith(PNG_SIGNATURE)


def test_png_with_colors_and_size():
    data = build_qr_png("hello", size=512, fill_color="#112233", back_color="#FFFFFF", error_level="h")
    assert data.startswith(PNG_SIGNATURE)


def test_svg():
    assert b"<svg" in build_qr_svg("hello", size=256, error_level="Q")


def test_oversized_data_raises_overflow():
    with pytest.raises(DataOverflowError):
        build_qr_png("x" * 3000)
    with pytest.raises(DataOverflowError):
        build_qr_svg("x" * 2000, error_level="H")
