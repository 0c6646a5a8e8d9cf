import base64
import binascii
import logging
import secrets
from typing import List, Optional
from urllib.parse import quote, urlparse, parse_qs

from constants import AppConstants
from models import Account, MigrationPayload, OtpParameter
from services import base32
from services.qr_code import build_qr_png

MIGRATION_PREFIX = "otpauth-migration://offline"

WIRE_VARINT = 0
WIRE_FIXED64 = 1
WIRE_LENGTH_DELIMITED = 2
WIRE_FIXED32 = 5

ALGO_SHA1  = 1
DIGITS_SIX = 1
TYPE_HOTP  = 1
TYPE_TOTP  = 2

MAX_BATCH_ID = 1_000_000


class DecodeError(ValueError):
    pass


# --- Encoder ---

def encode_varint(value: int) -> bytes:
    out = bytearray()
    n = value & 0xFFFFFFFF
    while n > 0x7F:
        out.append((n & 0x7F) | 0x80)
        n >>= 7
    out.append(n)
    return bytes(out)

def encode_tag(field_number: int, wire_type: int) -> bytes:
    return encode_varint((field_number << 3) | wire_type)

def encode_bytes(field_number: int, data: bytes) -> bytes:
    return encode_tag(field_number, WIRE_LENGTH_DELIMITED) + encode_varint(len(data)) + data

def encode_string(field_number: int, value: str) -> bytes:
    return encode_bytes(field_number, value.encode("utf-8"))

def encode_int32(field_number: int, value: int) -> bytes:
    # proto3 drops default values
    if value == 0:
        return b""
    return encode_tag(field_number, WIRE_VARINT) + encode_varint(value)

def encode_otp_parameter(param: OtpParameter) -> bytes:
    parts = [
        encode_bytes(1, param.secret),
        encode_string(2, param.name),
        encode_string(3, param.issuer),
        encode_int32(4, param.algorithm),
        encode_int32(5, param.digits),
        encode_int32(6, param.type),
    ]
    return b"".join(parts)

def encode_migration_payload(params: List[OtpParameter], batch_index: int = 0,
                             batch_size: int = 1, batch_id: int = 0) -> bytes:
    parts = [encode_bytes(1, encode_otp_parameter(p)) for p in params]
    parts.append(encode_int32(2, 1))
    parts.append(encode_int32(3, batch_size))
    if batch_index > 0:
        parts.append(encode_int32(4, batch_index))
    if batch_id > 0:
        parts.append(encode_int32(5, batch_id))
    return b"".join(parts)


# --- Decoder ---

class _Reader:
    def __init__(self, data: bytes):
        self.data = data
        self.pos = 0

    def at_end(self) -> bool:
        return self.pos >= len(self.data)

    def read(self, length: int) -> bytes:
        end = self.pos + length
        if end > len(self.data):
            raise DecodeError(f"Truncated field: need {length} bytes at offset {self.pos}")
        chunk = self.data[self.pos:end]
        self.pos = end
        return chunk


def decode_varint(reader: _Reader) -> int:
    result = 0
    shift = 0
    while True:
        if reader.at_end():
            raise DecodeError("Truncated varint")
        byte = reader.data[reader.pos]
        reader.pos += 1
        result |= (byte & 0x7F) << shift
        if not byte & 0x80:
            return result & 0xFFFFFFFF
        shift += 7
        if shift >= 70:
            raise DecodeError("Varint too long")

def decode_tag(reader: _Reader):
    value = decode_varint(reader)
    return value >> 3, value & 0x07

def decode_length_delimited(reader: _Reader) -> bytes:
    return reader.read(decode_varint(reader))

def _skip_field(reader: _Reader, wire_type: int) -> None:
    if wire_type == WIRE_VARINT:
        decode_varint(reader)
    elif wire_type == WIRE_LENGTH_DELIMITED:
        decode_length_delimited(reader)
    elif wire_type == WIRE_FIXED64:
        reader.read(8)
    elif wire_type == WIRE_FIXED32:
        reader.read(4)
    else:
        raise DecodeError(f"Unsupported wire type {wire_type}")

def decode_otp_parameter(data: bytes) -> OtpParameter:
    reader = _Reader(data)
    fields = {"secret": b"", "name": "", "issuer": "", "algorithm": ALGO_SHA1,
              "digits": DIGITS_SIX, "type": TYPE_TOTP}
    while not reader.at_end():
        field_number, wire_type = decode_tag(reader)
        if wire_type == WIRE_LENGTH_DELIMITED and field_number in (1, 2, 3):
            raw = decode_length_delimited(reader)
            if field_number == 1:
                fields["secret"] = raw
            else:
                try:
                    text = raw.decode("utf-8")
                except UnicodeDecodeError as e:
                    raise DecodeError("Invalid UTF-8 string") from e
                fields["name" if field_number == 2 else "issuer"] = text
        elif wire_type == WIRE_VARINT and field_number in (4, 5, 6):
            value = decode_varint(reader)
            fields[{4: "algorithm", 5: "digits", 6: "type"}[field_number]] = value
        else:
            _skip_field(reader, wire_type)
    return OtpParameter(**fields)

def decode_migration_payload(data: bytes) -> MigrationPayload:
    """Inverse of encode_migration_payload. Raises DecodeError on malformed input."""
    reader = _Reader(data)
    params = []
    meta = {"version": 0, "batch_size": 0, "batch_index": 0, "batch_id": 0}
    names = {2: "version", 3: "batch_size", 4: "batch_index", 5: "batch_id"}
    while not reader.at_end():
        field_number, wire_type = decode_tag(reader)
        if wire_type == WIRE_LENGTH_DELIMITED and field_number == 1:
            params.append(decode_otp_parameter(decode_length_delimited(reader)))
        elif wire_type == WIRE_VARINT and field_number in names:
            meta[names[field_number]] = decode_varint(reader)
        else:
            _skip_field(reader, wire_type)
    return MigrationPayload(otp_parameters=tuple(params), **meta)


# --- Public API ---

def _to_param(account: Account) -> OtpParameter:
    return OtpParameter(
        secret=base32.decode(account.secret),
        name=f"{account.issuer}:{account.name}" if account.issuer else account.name,
        issuer=account.issuer or account.name,
        algorithm=ALGO_SHA1,
        digits=DIGITS_SIX,
        type=TYPE_TOTP,
    )

def generate_migration_uris(accounts: List[Account], batch_id: Optional[int] = None) -> List[str]:
    """
    Build otpauth-migration:// URIs for Google Authenticator, one per batch of
    AppConstants.ACCOUNTS_PER_QR accounts. All URIs of one export share a
    random batch id. Raises base32.InvalidCharacter for a bad secret.
    """
    if not accounts:
        return []
    if batch_id is None:
        batch_id = secrets.randbelow(MAX_BATCH_ID - 1) + 1

    per_qr = AppConstants.ACCOUNTS_PER_QR
    total_batches = (len(accounts) + per_qr - 1) // per_qr
    uris = []
    for i in range(total_batches):
        params = [_to_param(a) for a in accounts[i * per_qr:(i + 1) * per_qr]]
        payload = encode_migration_payload(params, batch_index=i, batch_size=total_batches, batch_id=batch_id)
        data_b64 = base64.b64encode(payload).decode()
        uris.append(f"{MIGRATION_PREFIX}?data={quote(data_b64, safe='')}")
    return uris

def _b64_payload(data: str) -> bytes:
    # parse_qs turns an unescaped '+' into a space
    data = data.replace(" ", "+").strip()
    data += "=" * (-len(data) % 4)
    if "-" in data or "_" in data:
        return base64.b64decode(data, altchars=b"-_", validate=True)
    return base64.b64decode(data, validate=True)

def parse_migration_uri(uri: str) -> Optional[List[Account]]:
    """
    Recover TOTP accounts from an otpauth-migration:// URI.

    Returns None for anything malformed (wrong scheme, missing data, bad
    base64, truncated protobuf). HOTP entries and entries without a secret
    are dropped.
    """
    if not uri or not uri.startswith(MIGRATION_PREFIX):
        return None
    try:
        qs = parse_qs(urlparse(uri.strip()).query)
        data = qs.get("data", [None])[0]
        if not data:
            return None
        payload = decode_migration_payload(_b64_payload(data))
    except (binascii.Error, ValueError) as e:
        logging.warning(f"Failed to parse migration URI: {e}")
        return None

    accounts = []
    for p in payload.otp_parameters:
        if not p.secret or p.type != TYPE_TOTP:
            continue
        name = p.name
        issuer = p.issuer
        if ":" in name:
            prefix, name = name.split(":", 1)
            if not issuer:
                issuer = prefix.strip()
            name = name.strip()
        accounts.append(Account(
            name=name or issuer or AppConstants.DEFAULT_ACCOUNT_NAME,
            secret=base32.encode(p.secret),
            issuer=issuer or None,
        ))
    return accounts

def build_migration_qr_png(uri: str) -> bytes:
    return build_qr_png(uri)
