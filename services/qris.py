"""
QRIS (Quick Response Code Indonesian Standard) utilities.

A QRIS payload is an EMVCo merchant-presented QR string: concatenated
tag(2) length(2) value(L) records closed by a "6304" + CRC16 trailer.
"""
import logging
from decimal import Decimal
from typing import Dict, List, Optional, Union

from constants import AppConstants
from models import AdditionalData, MerchantAccountInfo, QRISData, TLV

CRC_POLYNOMIAL = 0x1021
CRC_TAG = "63"
CRC_HEADER = "6304"
COUNTRY_MARKER = "5802"

STATIC = "11"
DYNAMIC = "12"

Amount = Union[int, float, Decimal]


def parse_tlv(data: str) -> List[TLV]:
    """
    Split a TLV string into records. Parsing stops silently at the first
    record whose header or declared length does not fit the remaining input.
    """
    result = []
    index = 0
    while index + 4 <= len(data):
        tag = data[index:index + 2]
        length_str = data[index + 2:index + 4]
        if not (length_str.isascii() and length_str.isdigit()):
            break
        length = int(length_str)
        if index + 4 + length > len(data):
            break
        result.append(TLV(tag=tag, length=length, value=data[index + 4:index + 4 + length]))
        index += 4 + length
    return result


def encode_tlv(tag: str, value: str) -> str:
    if len(value) > 99:
        raise ValueError(f"TLV value for tag {tag} is longer than 99 characters")
    return f"{tag}{len(value):02d}{value}"


def calculate_crc16(data: str) -> str:
    """CRC16-CCITT (poly 0x1021, init 0xFFFF, no final XOR) as 4 uppercase hex digits."""
    crc = 0xFFFF
    for char in data:
        crc ^= (ord(char) << 8) & 0xFFFF
        for _ in range(8):
            if crc & 0x8000:
                crc = (crc << 1) ^ CRC_POLYNOMIAL
            else:
                crc <<= 1
        crc &= 0xFFFF
    return f"{crc:04X}"


def validate_crc(payload: str) -> bool:
    if len(payload) < 8:
        return False
    return payload[-4:].upper() == calculate_crc16(payload[:-4])


def _merchant_account_info(value: str) -> Dict[str, str]:
    info = {}
    for sub in parse_tlv(value):
        if sub.tag == "00":
            info["global_unique_id"] = sub.value
        elif sub.tag in ("01", "02"):
            info["merchant_id"] = sub.value
        elif sub.tag == "03":
            info["merchant_criteria"] = sub.value
    return info


def _additional_data(value: str) -> AdditionalData:
    labels = {}
    for sub in parse_tlv(value):
        if sub.tag == "05":
            labels["reference_label"] = sub.value
        elif sub.tag == "07":
            labels["terminal_label"] = sub.value
    return AdditionalData(**labels)


_SIMPLE_TAGS = {
    "00": "payload_format",
    "52": "merchant_category_code",
    "53": "transaction_currency",
    "54": "transaction_amount",
    "58": "country_code",
    "59": "merchant_name",
    "60": "merchant_city",
    "61": "postal_code",
    "63": "crc",
}


def parse_qris(raw: str) -> Optional[QRISData]:
    """Parse a QRIS payload. Returns None when no TLV record can be read."""
    try:
        clean = raw.strip()
        records = parse_tlv(clean)
    except (AttributeError, TypeError) as e:
        logging.debug(f"Cannot parse QRIS payload: {e}")
        return None
    if not records:
        return None

    fields = {
        "payload_format": "",
        "point_of_initiation": "",
        "merchant_category_code": "",
        "transaction_currency": "",
        "country_code": "",
        "merchant_name": "",
        "merchant_city": "",
        "crc": "",
        "is_static": True,
    }
    mai = {}
    for tlv in records:
        if tlv.tag in _SIMPLE_TAGS:
            fields[_SIMPLE_TAGS[tlv.tag]] = tlv.value
        elif tlv.tag == "01":
            fields["point_of_initiation"] = tlv.value
            fields["is_static"] = tlv.value == STATIC
        elif tlv.tag in ("26", "51"):
            mai.update(_merchant_account_info(tlv.value))
        elif tlv.tag == "62":
            fields["additional_data"] = _additional_data(tlv.value)

    return QRISData(
        merchant_account_info=MerchantAccountInfo(**mai),
        is_valid=validate_crc(clean),
        raw_data=clean,
        records=tuple(records),
        **fields,
    )


def is_valid_qris(raw: str) -> bool:
    if not raw or not isinstance(raw, str):
        return False
    if len(raw) < AppConstants.MIN_QRIS_LENGTH:
        return False
    if not raw.startswith("0002"):
        return False
    if not validate_crc(raw):
        return False
    parsed = parse_qris(raw)
    return parsed is not None and parsed.payload_format == "01"


def format_amount(amount: Amount) -> str:
    if isinstance(amount, float) and amount.is_integer():
        return str(int(amount))
    return str(amount)


def _merge_additional_data(existing: str, reference_label: Optional[str], terminal_label: Optional[str]) -> str:
    overrides = {}
    if reference_label:
        overrides["05"] = reference_label
    if terminal_label:
        overrides["07"] = terminal_label

    parts = []
    for sub in parse_tlv(existing):
        if sub.tag in overrides:
            parts.append(encode_tlv(sub.tag, overrides.pop(sub.tag)))
        else:
            parts.append(encode_tlv(sub.tag, sub.value))
    for tag in sorted(overrides):
        parts.append(encode_tlv(tag, overrides[tag]))
    return "".join(parts)


def convert_to_dynamic_qris(static_payload: str, amount: Amount,
                            reference_label: Optional[str] = None,
                            terminal_label: Optional[str] = None) -> Optional[str]:
    """
    Rewrite a static QRIS into a dynamic one carrying `amount`.

    Tag 01 becomes "12", tag 54 is replaced (or inserted), the reference and
    terminal labels are merged into tag 62, and a fresh CRC is appended.
    A missing tag 54 is spliced in front of the first "5802" substring when
    that substring occurs exactly once; otherwise it is appended at the end.
    Returns None on failure.
    """
    try:
        records = parse_tlv(static_payload.strip())
        if not records:
            return None

        amount_str = format_amount(amount)
        has_labels = bool(reference_label or terminal_label)
        result = ""
        has_amount = False
        has_additional_data = False

        for tlv in records:
            if tlv.tag == CRC_TAG:
                continue
            if tlv.tag == "01":
                result += encode_tlv("01", DYNAMIC)
            elif tlv.tag == "54":
                result += encode_tlv("54", amount_str)
                has_amount = True
            elif tlv.tag == "62":
                if has_labels:
                    result += encode_tlv("62", _merge_additional_data(tlv.value, reference_label, terminal_label))
                else:
                    result += encode_tlv(tlv.tag, tlv.value)
                has_additional_data = True
            else:
                result += encode_tlv(tlv.tag, tlv.value)

        if not has_amount and amount > 0:
            parts = result.split(COUNTRY_MARKER)
            if len(parts) == 2:
                result = parts[0] + encode_tlv("54", amount_str) + COUNTRY_MARKER + parts[1]
            else:
                result += encode_tlv("54", amount_str)

        if not has_additional_data and has_labels:
            result += encode_tlv("62", _merge_additional_data("", reference_label, terminal_label))

        result += CRC_HEADER
        return result + calculate_crc16(result)
    except (AttributeError, TypeError, ValueError) as e:
        logging.warning(f"Failed to convert QRIS to dynamic: {e}")
        return None


def format_rupiah(amount: Amount) -> str:
    """Indonesian Rupiah without decimals, e.g. "Rp 10.000", with a no-break space after "Rp"."""
    rounded = int(Decimal(str(amount)).quantize(Decimal(1)))
    sign = "-" if rounded < 0 else ""
    return f"{sign}Rp\u00a0{abs(rounded):,}".replace(",", ".")


def get_qris_type_description(is_static: bool) -> str:
    if is_static:
        return "Static QRIS - dapat digunakan berulang (tanpa nominal)"
    return "Dynamic QRIS - sekali pakai (dengan nominal)"
