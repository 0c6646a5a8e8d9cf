import io
from dataclasses import asdict
from typing import Optional
from fastapi import APIRouter, Form, HTTPException
from fastapi.responses import JSONResponse
from qrcode.exceptions import DataOverflowError
from starlette.responses import StreamingResponse
from services.qr_code import build_qr_png
from services.qris import (
    parse_qris, is_valid_qris, convert_to_dynamic_qris, format_rupiah, get_qris_type_description,
)
from services.validator import validate_qris_conversion

router = APIRouter(prefix="/qris", tags=["qris"])


@router.post("/parse")
async def post_parse(payload: str = Form(...)):
    data = parse_qris(payload)
    if data is None:
        raise HTTPException(status_code=400, detail="Could not read QRIS data.")
    content = asdict(data)
    content.pop("records")
    content["is_qris"] = is_valid_qris(data.raw_data)
    content["description"] = get_qris_type_description(data.is_static)
    return JSONResponse(content=content)


@router.post("/convert")
async def post_convert(payload: str = Form(...), amount: int = Form(...),
                       reference_label: Optional[str] = Form(None), terminal_label: Optional[str] = Form(None)):
    error_msg = validate_qris_conversion(payload, amount)
    if error_msg:
        raise HTTPException(status_code=400, detail=error_msg)

    result = convert_to_dynamic_qris(payload, amount, reference_label=reference_label or None,
                                     terminal_label=terminal_label or None)
    if result is None:
        raise HTTPException(status_code=400, detail="Failed to generate QRIS")
    return JSONResponse(content={
        "payload": result,
        "amount": amount,
        "formatted_amount": format_rupiah(amount),
        "crc": result[-4:],
    })


@router.post("/qr")
async def post_qr(payload: str = Form(...)):
    if parse_qris(payload) is None:
        raise HTTPException(status_code=400, detail="Could not read QRIS data.")
    try:
        png_bytes = build_qr_png(payload.strip())
    except DataOverflowError:
        raise HTTPException(status_code=400, detail="QRIS payload is too long for a QR code")
    return StreamingResponse(io.BytesIO(png_bytes), media_type="image/png",
                             headers={"Content-Disposition": 'inline; filename="qris.png"'})
