import io
from typing import Optional
from fastapi import APIRouter, Form, HTTPException, Query
from fastapi.responses import JSONResponse, Response
from qrcode.exceptions import DataOverflowError
from starlette.responses import StreamingResponse
from constants import AppConstants
from schemas import AccountList
from services.google_auth import build_migration_qr_png
from services.import_export_service import ImportExportService
from services.totp_service import TotpService, InvalidSecret, parse_otpauth_uri, format_secret
from services.validator import validate_account, validate_issuer

router = APIRouter(prefix="/totp", tags=["totp"])


def _accounts_or_400(body: AccountList):
    accounts = body.to_accounts()
    seen = []
    for account in accounts:
        error_msg = validate_account(account.name, account.secret, seen) or validate_issuer(account.issuer)
        if error_msg:
            raise HTTPException(status_code=400, detail=f"{account.name or '?'}: {error_msg}")
        seen.append(account.name)
    return accounts


@router.post("/code")
async def post_code(secret: str = Form(...), digits: int = Form(AppConstants.DEFAULT_DIGITS),
                    period: int = Form(AppConstants.DEFAULT_PERIOD), timestamp: Optional[int] = Form(None)):
    if digits < 1 or digits > 10 or period < 1:
        raise HTTPException(status_code=400, detail="Invalid digits or period.")
    try:
        result = TotpService.code_for(secret, digits=digits, period=period, timestamp=timestamp)
    except InvalidSecret:
        raise HTTPException(status_code=400, detail="Failed to generate code. Check your secret.")
    result["secret"] = format_secret(secret)
    return JSONResponse(content=result)


@router.post("/codes")
async def post_codes(body: AccountList):
    return JSONResponse(content=TotpService.codes_for(body.to_accounts()))


@router.post("/parse-uri")
async def post_parse_uri(uri: str = Form(...)):
    account = parse_otpauth_uri(uri.strip())
    if account is None:
        raise HTTPException(status_code=400, detail="Invalid otpauth:// URI.")
    return JSONResponse(content={"name": account.name, "secret": account.secret, "issuer": account.issuer})


@router.post("/import")
async def import_accounts(data: str = Form(...)):
    accounts, error_msg = ImportExportService.import_accounts(data)
    if error_msg:
        raise HTTPException(status_code=400, detail=error_msg)
    return JSONResponse(content={
        "count": len(accounts),
        "accounts": [{"name": a.name, "secret": a.secret, "issuer": a.issuer} for a in accounts],
    })


@router.post("/export/google")
async def export_google(body: AccountList):
    uris = ImportExportService.export_accounts(_accounts_or_400(body), "google")
    return JSONResponse(content={"count": len(uris), "uris": uris})


@router.post("/export/google/qr")
async def export_google_qr(body: AccountList, index: int = Query(0, ge=0)):
    uris = ImportExportService.export_accounts(_accounts_or_400(body), "google")
    if index >= len(uris):
        raise HTTPException(status_code=404, detail="Batch not found")
    try:
        png_bytes = build_migration_qr_png(uris[index])
    except DataOverflowError:
        raise HTTPException(status_code=400, detail="Batch is too large for a QR code")
    return StreamingResponse(io.BytesIO(png_bytes), media_type="image/png",
                             headers={"Content-Disposition": f'inline; filename="google_auth_{index + 1}.png"'})


@router.post("/export/aegis")
async def export_aegis(body: AccountList):
    vault = ImportExportService.export_accounts(_accounts_or_400(body), "aegis")
    return Response(content=vault, media_type="application/json",
                    headers={"Content-Disposition": 'attachment; filename="aegis_export.json"'})


@router.post("/export/uris")
async def export_uris(body: AccountList):
    uris = ImportExportService.export_accounts(_accounts_or_400(body), "uri")
    return JSONResponse(content={"uris": uris})
