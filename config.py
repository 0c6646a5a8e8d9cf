import os
from dotenv import load_dotenv

load_dotenv()

class Settings:
    PORT: str = os.getenv("PORT", "8000")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
    LOG_FILE: str = os.getenv("LOG_FILE", "")
    QR_BOX_SIZE: int = int(os.getenv("QR_BOX_SIZE", "10"))
    QR_BORDER: int = int(os.getenv("QR_BORDER", "4"))
    ADDRESS_DATA_FILE: str = os.getenv("ADDRESS_DATA_FILE", "")
    RELOAD: bool = os.getenv("RELOAD", "false").lower() in ("1", "true", "yes")

settings = Settings()
