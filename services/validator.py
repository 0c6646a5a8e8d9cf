from typing import Iterable, Optional
from constants import AppConstants
from services.card import is_valid_bin
from services.qris import parse_qris
from services.totp_service import is_valid_secret
from utils import digits_only, sanitize_input, strip_whitespace


def validate_account(name: str, secret: str, existing_names: Iterable[str] = ()) -> Optional[str]:
    name = sanitize_input(name)
    secret = strip_whitespace(secret).upper()

    if not name:
        return "Please enter an account name"
    if len(name) > AppConstants.MAX_ACCOUNT_LENGTH:
        return f"Account name is too long (max {AppConstants.MAX_ACCOUNT_LENGTH} characters)."
    if not is_valid_secret(secret):
        return "Invalid secret key format"
    if any(name.lower() == (n or "").strip().lower() for n in existing_names):
        return "Account already exists"
    return None

def validate_issuer(issuer: Optional[str]) -> Optional[str]:
    if issuer and len(sanitize_input(issuer)) > AppConstants.MAX_ISSUER_LENGTH:
        return f"Issuer is too long (max {AppConstants.MAX_ISSUER_LENGTH} characters)."
    return None

def validate_card_request(quantity: int, bin_number: Optional[str]) -> Optional[str]:
    if quantity < AppConstants.MIN_CARD_QUANTITY or quantity > AppConstants.MAX_CARD_QUANTITY:
        return f"Quantity must be between {AppConstants.MIN_CARD_QUANTITY} and {AppConstants.MAX_CARD_QUANTITY}"
    if not bin_number:
        return "Please enter a BIN number"
    if not is_valid_bin(bin_number):
        return f"Invalid BIN format. Use 1-{AppConstants.MAX_BIN_LENGTH} digits."
    return None

def validate_card_number(number: str) -> Optional[str]:
    cleaned = strip_whitespace(number)
    if not cleaned or digits_only(cleaned) != cleaned:
        return "Please enter a valid card number"
    return None

def validate_qris_conversion(payload: str, amount: int) -> Optional[str]:
    parsed = parse_qris(payload or "")
    if parsed is None or not parsed.is_valid:
        return "Please provide a valid QRIS first"
    if amount <= 0:
        return "Please enter a valid amount"
    return None

def validate_qr_text(text: str) -> Optional[str]:
    if not text or not text.strip():
        return "Please enter text to generate QR code"
    if len(text) > AppConstants.MAX_QR_TEXT_LENGTH:
        return f"Text is too long (max {AppConstants.MAX_QR_TEXT_LENGTH} characters)."
    return None

def validate_address_request(quantity: int, country_code: Optional[str], known_codes: Iterable[str]) -> Optional[str]:
    if quantity < AppConstants.MIN_ADDRESS_QUANTITY or quantity > AppConstants.MAX_ADDRESS_QUANTITY:
        return f"Quantity must be between {AppConstants.MIN_ADDRESS_QUANTITY} and {AppConstants.MAX_ADDRESS_QUANTITY}"
    if not country_code:
        return "Please select a country"
    if country_code not in known_codes:
        return f"Unknown country: {country_code}"
    return None
