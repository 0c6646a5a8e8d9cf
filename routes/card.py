from dataclasses import asdict
from fastapi import APIRouter, Form, HTTPException
from fastapi.responses import JSONResponse, PlainTextResponse
from models import GenerateCardOptions
from schemas import CardGenerateRequest
from services.card import CARD_TYPES, detect_card_type, generate_cards, luhn_check, export_pipe
from services.validator import validate_card_request, validate_card_number
from utils import strip_whitespace

router = APIRouter(prefix="/card", tags=["card"])


@router.get("/types")
async def get_types():
    return JSONResponse(content={key: asdict(t) for key, t in CARD_TYPES.items()})


@router.post("/generate")
async def post_generate(body: CardGenerateRequest):
    error_msg = validate_card_request(body.quantity, body.bin)
    if error_msg:
        raise HTTPException(status_code=400, detail=error_msg)

    options = GenerateCardOptions(
        bin=body.bin,
        expiry_month=body.expiry_month or None,
        expiry_year=body.expiry_year or None,
        cvv=body.cvv or None,
        card_type=body.card_type,
    )
    try:
        cards = generate_cards(body.quantity, options)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if body.format == "pipe":
        return PlainTextResponse(export_pipe(cards))
    return JSONResponse(content={
        "count": len(cards),
        "all_valid": all(c.is_valid for c in cards),
        "cards": [asdict(c) for c in cards],
    })


@router.post("/validate")
async def post_validate(number: str = Form(...)):
    error_msg = validate_card_number(number)
    if error_msg:
        raise HTTPException(status_code=400, detail=error_msg)
    cleaned = strip_whitespace(number)
    type_key = detect_card_type(cleaned)
    return JSONResponse(content={
        "valid": luhn_check(cleaned),
        "type_key": type_key,
        "type_name": CARD_TYPES[type_key].name if type_key else None,
    })
