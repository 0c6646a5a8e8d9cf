import logging
import struct
import time
from typing import List, Optional
from urllib.parse import urlparse, parse_qs, unquote

import pyotp
from cryptography.hazmat.primitives import hashes, hmac

from constants import AppConstants
from models import Account
from services import base32
from utils import strip_whitespace

COUNTER_MASK = 0xFFFFFFFFFFFFFFFF


class InvalidSecret(ValueError):
    pass


def _now_ms() -> int:
    return int(time.time() * 1000)


def _hmac_sha1(key: bytes, message: bytes) -> bytes:
    h = hmac.HMAC(key, hashes.SHA1())
    h.update(message)
    return h.finalize()


def _dynamic_truncate(digest: bytes, digits: int) -> str:
    offset = digest[-1] & 0x0F
    code = struct.unpack(">I", digest[offset:offset + 4])[0] & 0x7FFFFFFF
    return str(code % (10 ** digits)).zfill(digits)


def _decode_secret(secret: str) -> bytes:
    try:
        key = base32.decode(secret)
    except base32.InvalidCharacter as e:
        raise InvalidSecret(str(e)) from e
    if not key:
        raise InvalidSecret("Secret is empty")
    return key


def hotp(secret: str, counter: int, digits: int = AppConstants.DEFAULT_DIGITS) -> str:
    """
    RFC 4226 HOTP value for a Base32 secret and counter.

    The counter is packed as an 8-byte big-endian integer, signed with
    HMAC-SHA1 and dynamically truncated to `digits` decimal digits. Counters
    outside 0..2**64-1 wrap to their low 64 bits.
    Raises InvalidSecret when the secret does not decode.
    """
    key = _decode_secret(secret)
    digest = _hmac_sha1(key, struct.pack(">Q", counter & COUNTER_MASK))
    return _dynamic_truncate(digest, digits)


def generate_totp(
    secret: str,
    digits: int = AppConstants.DEFAULT_DIGITS,
    period: int = AppConstants.DEFAULT_PERIOD,
    timestamp: Optional[float] = None,
) -> str:
    """
    RFC 6238 TOTP code. `timestamp` is in milliseconds since the epoch and
    defaults to the current time.
    """
    if timestamp is None:
        timestamp = _now_ms()
    counter = int(timestamp // 1000 // period)
    return hotp(secret, counter, digits)


def remaining_seconds(period: int = AppConstants.DEFAULT_PERIOD, timestamp: Optional[float] = None) -> int:
    if timestamp is None:
        timestamp = _now_ms()
    return period - (int(timestamp // 1000) % period)


def is_valid_secret(secret: Optional[str]) -> bool:
    if not secret or not isinstance(secret, str):
        return False
    cleaned = base32.normalize(secret)
    if not cleaned:
        return False
    return all(c in base32.BASE32_CHARS for c in cleaned)


def format_secret(secret: str) -> str:
    """Group a secret in blocks of four for display"""
    cleaned = strip_whitespace(secret).upper()
    return " ".join(cleaned[i:i + 4] for i in range(0, len(cleaned), 4))


def parse_otpauth_uri(uri: str) -> Optional[Account]:
    """
    Parse otpauth://totp/<label>?secret=...&issuer=...

    An "Issuer:" prefix on the label is stripped. Returns None when the URI
    is not a TOTP URI or carries no valid secret.
    """
    if not uri or not uri.startswith("otpauth://totp/"):
        return None
    try:
        p = urlparse(uri)
        qs = parse_qs(p.query)
    except ValueError:
        logging.debug("Unparseable otpauth URI")
        return None

    secret = qs.get("secret", [None])[0]
    if not secret:
        return None
    secret = strip_whitespace(secret).upper()
    if not is_valid_secret(secret):
        return None

    issuer = qs.get("issuer", [None])[0] or None
    label = unquote(p.path[len("/totp/"):])
    if ":" in label:
        label = label.split(":", 1)[1].strip()

    name = label or issuer or AppConstants.DEFAULT_ACCOUNT_NAME
    return Account(name=name, secret=secret, issuer=issuer)


def build_otpauth_uri(account: Account) -> str:
    return pyotp.TOTP(account.secret).provisioning_uri(name=account.name, issuer_name=account.issuer)


class TotpService:
    @staticmethod
    def code_for(secret: str, digits: int = AppConstants.DEFAULT_DIGITS,
                 period: int = AppConstants.DEFAULT_PERIOD, timestamp: Optional[float] = None) -> dict:
        if timestamp is None:
            timestamp = _now_ms()
        return {
            "code": generate_totp(secret, digits=digits, period=period, timestamp=timestamp),
            "remaining": remaining_seconds(period, timestamp),
            "period": period,
        }

    @staticmethod
    def codes_for(accounts: List[Account], timestamp: Optional[float] = None) -> List[dict]:
        """Current code per account; an account with a broken secret gets "Error"."""
        if timestamp is None:
            timestamp = _now_ms()
        output = []
        for account in accounts:
            try:
                code = generate_totp(account.secret, timestamp=timestamp)
            except InvalidSecret as e:
                logging.warning(f"Cannot generate code for {account.name}: {e}")
                code = "Error"
            output.append({
                "name": account.name,
                "issuer": account.issuer,
                "code": code,
                "remaining": remaining_seconds(timestamp=timestamp),
            })
        return output
