import io
from typing import Literal
from fastapi import APIRouter, Form, HTTPException
from qrcode.exceptions import DataOverflowError
from starlette.responses import StreamingResponse
from services.qr_code import build_qr_png, build_qr_svg, ERROR_LEVELS
from services.validator import validate_qr_text

router = APIRouter(prefix="/qr", tags=["qr"])


@router.post("/generate")
async def post_generate(text: str = Form(...), size: int = Form(256), fill_color: str = Form("#000000"),
                        back_color: str = Form("#FFFFFF"), error_level: str = Form("M"),
                        format: Literal["png", "svg"] = Form("png")):
    error_msg = validate_qr_text(text)
    if error_msg:
        raise HTTPException(status_code=400, detail=error_msg)
    if error_level.upper() not in ERROR_LEVELS:
        raise HTTPException(status_code=400, detail="Error level must be one of L, M, Q, H")
    if size < 64 or size > 2048:
        raise HTTPException(status_code=400, detail="Size must be between 64 and 2048 pixels")

    try:
        if format == "svg":
            data = build_qr_svg(text, size=size, error_level=error_level)
            media_type = "image/svg+xml"
        else:
            data = build_qr_png(text, size=size, fill_color=fill_color, back_color=back_color,
                                error_level=error_level)
            media_type = "image/png"
    except DataOverflowError:
        raise HTTPException(status_code=400, detail="Text is too long for the selected error level")
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid color")
    return StreamingResponse(io.BytesIO(data), media_type=media_type,
                             headers={"Content-Disposition": f'inline; filename="qrcode.{format}"'})
