import io
from typing import Optional

import qrcode
import qrcode.image.svg
from qrcode.constants import ERROR_CORRECT_L, ERROR_CORRECT_M, ERROR_CORRECT_Q, ERROR_CORRECT_H
from qrcode.exceptions import DataOverflowError

from config import settings

ERROR_LEVELS = {
    "L": ERROR_CORRECT_L,
    "M": ERROR_CORRECT_M,
    "Q": ERROR_CORRECT_Q,
    "H": ERROR_CORRECT_H,
}


def _make_qr(data: str, error_level: str, size: Optional[int]) -> qrcode.QRCode:
    qr = qrcode.QRCode(
        error_correction=ERROR_LEVELS[error_level.upper()],
        box_size=settings.QR_BOX_SIZE,
        border=settings.QR_BORDER,
    )
    qr.add_data(data)
    try:
        qr.make(fit=True)
    except ValueError as e:
        # overflow past version 40 surfaces as ValueError("Invalid version ...")
        raise DataOverflowError(str(e)) from e
    if size:
        # fit the requested pixel size as closely as whole boxes allow
        modules = qr.modules_count + 2 * settings.QR_BORDER
        qr.box_size = max(1, size // modules)
    return qr


def build_qr_png(data: str, size: Optional[int] = None, fill_color: str = "black",
                 back_color: str = "white", error_level: str = "M") -> bytes:
    qr = _make_qr(data, error_level, size)
    img = qr.make_image(fill_color=fill_color, back_color=back_color)
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def build_qr_svg(data: str, size: Optional[int] = None, error_level: str = "M") -> bytes:
    qr = _make_qr(data, error_level, size)
    img = qr.make_image(image_factory=qrcode.image.svg.SvgPathImage)
    buf = io.BytesIO()
    img.save(buf)
    return buf.getvalue()
