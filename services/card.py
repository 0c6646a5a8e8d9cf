import json
import random
from dataclasses import asdict
from datetime import date
from typing import Dict, List, Optional

from models import CardType, GenerateCardOptions, GeneratedCard
from utils import digits_only

# Declaration order is the tie-break for detect_card_type
CARD_TYPES: Dict[str, CardType] = {
    "visa": CardType(name="Visa", prefixes=("4",), length=16, cvv_length=3),
    "mastercard": CardType(name="Mastercard", prefixes=("51", "52", "53", "54", "55"), length=16, cvv_length=3),
    "amex": CardType(name="American Express", prefixes=("34", "37"), length=15, cvv_length=4),
    "discover": CardType(name="Discover", prefixes=("6011", "65"), length=16, cvv_length=3),
    "jcb": CardType(name="JCB", prefixes=("3528", "3529", "353", "354", "355", "356", "357", "358"),
                    length=16, cvv_length=3),
    "unionpay": CardType(name="UnionPay", prefixes=("62",), length=16, cvv_length=3),
}

DEFAULT_CARD_TYPE = "visa"


def luhn_check(card_number: str) -> bool:
    digits = digits_only(card_number)
    if not digits:
        return False
    total = 0
    for i, ch in enumerate(reversed(digits)):
        digit = int(ch)
        if i % 2 == 1:
            digit *= 2
            if digit > 9:
                digit -= 9
        total += digit
    return total % 10 == 0


def calculate_luhn_check_digit(partial_number: str) -> int:
    """Check digit to append to `partial_number` so the result passes Luhn."""
    total = 0
    for i, ch in enumerate(reversed(digits_only(partial_number))):
        digit = int(ch)
        # the rightmost existing digit sits next to the check digit, so it is doubled
        if i % 2 == 0:
            digit *= 2
            if digit > 9:
                digit -= 9
        total += digit
    return (10 - total % 10) % 10


def _random_digits(count: int) -> str:
    return "".join(str(random.randint(0, 9)) for _ in range(count))


def get_card_type(key: str) -> CardType:
    try:
        return CARD_TYPES[key]
    except KeyError:
        raise ValueError(f"Unknown card type: {key}") from None


def detect_card_type(bin_number: str) -> Optional[str]:
    clean = digits_only(bin_number)
    for key, card_type in CARD_TYPES.items():
        if any(clean.startswith(prefix) for prefix in card_type.prefixes):
            return key
    return None


def format_card_number(number: str) -> str:
    clean = digits_only(number)
    if len(clean) == 15 and clean.startswith(("34", "37")):
        return f"{clean[:4]} {clean[4:10]} {clean[10:]}"
    return " ".join(clean[i:i + 4] for i in range(0, len(clean), 4))


def _generate_expiry(month: Optional[str], year: Optional[str]) -> str:
    if month and year:
        month_digits = digits_only(month)
        m = int(month_digits) if month_digits else 1
        m = min(max(m, 1), 12)

        y = digits_only(year)
        if len(y) == 4:
            y = y[2:]
        if len(y) == 1:
            y = "2" + y
        if not y:
            y = str(date.today().year + 3)[2:]
        return f"{m:02d}/{y}"

    future_year = date.today().year + random.randint(1, 5)
    return f"{random.randint(1, 12):02d}/{str(future_year)[2:]}"


def _generate_cvv(pattern: Optional[str], length: int) -> str:
    if not pattern:
        return _random_digits(length)
    cvv = ""
    for char in pattern:
        if char in "xX":
            cvv += _random_digits(1)
        elif char in "0123456789":
            cvv += char
    if len(cvv) < length:
        cvv += _random_digits(length - len(cvv))
    return cvv[:length]


def generate_card(options: Optional[GenerateCardOptions] = None) -> GeneratedCard:
    """
    Synthesize a Luhn-valid test card number.

    A BIN decides the card type when it matches a known prefix; otherwise the
    requested type (visa by default) is used and, without a BIN, one of its
    prefixes is picked at random. A BIN at or beyond the target length is cut
    to length - 1 before the check digit is appended.
    """
    options = options or GenerateCardOptions()
    bin_number = digits_only(options.bin)
    type_key = detect_card_type(bin_number) if bin_number else None
    if type_key is None:
        type_key = options.card_type or DEFAULT_CARD_TYPE
    card_type = get_card_type(type_key)

    if not bin_number:
        bin_number = random.choice(card_type.prefixes)

    digits_needed = card_type.length - len(bin_number) - 1
    if digits_needed > 0:
        partial = bin_number + _random_digits(digits_needed)
    else:
        partial = bin_number[:card_type.length - 1]
    number = partial + str(calculate_luhn_check_digit(partial))

    return GeneratedCard(
        number=number,
        formatted_number=format_card_number(number),
        expiry=_generate_expiry(options.expiry_month, options.expiry_year),
        cvv=_generate_cvv(options.cvv, card_type.cvv_length),
        type_name=card_type.name,
        type_key=type_key,
        is_valid=luhn_check(number),
    )


def generate_cards(quantity: int, options: Optional[GenerateCardOptions] = None) -> List[GeneratedCard]:
    return [generate_card(options) for _ in range(quantity)]


def is_valid_bin(bin_number: str) -> bool:
    clean = digits_only(bin_number)
    return 1 <= len(clean) <= 14


def to_pipe_line(card: GeneratedCard) -> str:
    month, year = card.expiry.split("/")
    return f"{card.number}|{month}|{year}|{card.cvv}"


def export_pipe(cards: List[GeneratedCard]) -> str:
    return "\n".join(to_pipe_line(c) for c in cards)


def export_json(cards: List[GeneratedCard]) -> str:
    return json.dumps([asdict(c) for c in cards], indent=2)
