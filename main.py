import os
import uvicorn
import logging
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from starlette.exceptions import HTTPException
from starlette.responses import JSONResponse

from config import settings
from routes.totp import router as totp_router
from routes.qris import router as qris_router
from routes.card import router as card_router
from routes.qr import router as qr_router
from routes.address import router as address_router

if settings.LOG_FILE:
    os.makedirs(os.path.dirname(settings.LOG_FILE) or ".", exist_ok=True)

logging.basicConfig(
    filename=settings.LOG_FILE or None,
    level=getattr(logging, settings.LOG_LEVEL, logging.INFO),
    format="%(asctime)s [%(levelname)s] %(message)s",
    datefmt="%Y/%m/%d %H:%M:%S"
)

app = FastAPI(title="Dev Tools", redoc_url=None)

app.include_router(totp_router)
app.include_router(qris_router)
app.include_router(card_router)
app.include_router(qr_router)
app.include_router(address_router)

@app.exception_handler(HTTPException)
async def custom_http_exception_handler(request: Request, exc: HTTPException):
    if exc.status_code == 404 and exc.detail == "Not Found":
        return JSONResponse({"detail": f"No route for {request.url.path}"}, status_code=404)
    return JSONResponse({"detail": exc.detail}, status_code=exc.status_code, headers=getattr(exc, "headers", None))

@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        {"detail": "Invalid request", "errors": jsonable_encoder(exc.errors())},
        status_code=422
    )

@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logging.exception(f"Unhandled error for request: {request.url}")
    return JSONResponse({"detail": "Internal server error"}, status_code=500)

@app.get("/health", status_code=status.HTTP_200_OK)
@app.head("/health", status_code=status.HTTP_200_OK)
async def health_check():
    return JSONResponse(content={"status": "ok"})

if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=int(settings.PORT or 8000), reload=settings.RELOAD)
