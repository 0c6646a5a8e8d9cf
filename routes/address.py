import logging
from dataclasses import asdict
from fastapi import APIRouter, HTTPException
from fastapi.responses import JSONResponse
from config import settings
from models import AddressOptions
from schemas import AddressGenerateRequest
from services.address import load_country_data, generate_addresses, format_address
from services.validator import validate_address_request

router = APIRouter(prefix="/address", tags=["address"])


def _country_data():
    if not settings.ADDRESS_DATA_FILE:
        raise HTTPException(status_code=503, detail="Address data is not configured")
    try:
        return load_country_data(settings.ADDRESS_DATA_FILE)
    except (OSError, ValueError) as e:
        logging.error(f"Cannot load address data from {settings.ADDRESS_DATA_FILE}: {e}")
        raise HTTPException(status_code=503, detail="Address data is unavailable")


@router.get("/countries")
async def get_countries():
    data = _country_data()
    return JSONResponse(content={code: {"name": c.name, "flag": c.flag} for code, c in data.items()})


@router.post("/generate")
async def post_generate(body: AddressGenerateRequest):
    data = _country_data()
    error_msg = validate_address_request(body.quantity, body.country, data)
    if error_msg:
        raise HTTPException(status_code=400, detail=error_msg)

    options = AddressOptions(
        include_name=body.include_name,
        include_phone=body.include_phone,
        include_email=body.include_email,
    )
    addresses = generate_addresses(data, body.country, body.quantity, options)
    country = data[body.country]
    return JSONResponse(content={
        "count": len(addresses),
        "addresses": [dict(asdict(a), formatted=format_address(a, country)) for a in addresses],
    })
