from dataclasses import dataclass, field
from typing import Optional, Tuple


@dataclass(frozen=True)
class Account:
    name: str
    secret: str
    issuer: Optional[str] = None


@dataclass(frozen=True)
class OtpParameter:
    """One entry of a Google Authenticator migration payload.

    ``secret`` holds the raw key bytes. The enum fields use the values of the
    migration schema: algorithm 1=SHA1 2=SHA256 3=SHA512 4=MD5, digits 1=six
    2=eight, type 1=HOTP 2=TOTP.
    """
    secret: bytes
    name: str = ""
    issuer: str = ""
    algorithm: int = 1
    digits: int = 1
    type: int = 2


@dataclass(frozen=True)
class MigrationPayload:
    otp_parameters: Tuple[OtpParameter, ...] = ()
    version: int = 0
    batch_size: int = 0
    batch_index: int = 0
    batch_id: int = 0


@dataclass(frozen=True)
class TLV:
    tag: str
    length: int
    value: str


@dataclass(frozen=True)
class MerchantAccountInfo:
    global_unique_id: str = ""
    merchant_id: str = ""
    merchant_criteria: str = ""


@dataclass(frozen=True)
class AdditionalData:
    reference_label: Optional[str] = None
    terminal_label: Optional[str] = None


@dataclass(frozen=True)
class QRISData:
    payload_format: str
    point_of_initiation: str
    merchant_account_info: MerchantAccountInfo
    merchant_category_code: str
    transaction_currency: str
    country_code: str
    merchant_name: str
    merchant_city: str
    crc: str
    is_static: bool
    is_valid: bool
    raw_data: str
    transaction_amount: Optional[str] = None
    postal_code: Optional[str] = None
    additional_data: Optional[AdditionalData] = None
    records: Tuple[TLV, ...] = field(default=(), repr=False)


@dataclass(frozen=True)
class CardType:
    name: str
    prefixes: Tuple[str, ...]
    length: int
    cvv_length: int


@dataclass(frozen=True)
class GenerateCardOptions:
    bin: Optional[str] = None
    expiry_month: Optional[str] = None
    expiry_year: Optional[str] = None
    cvv: Optional[str] = None
    card_type: Optional[str] = None


@dataclass(frozen=True)
class GeneratedCard:
    number: str
    formatted_number: str
    expiry: str
    cvv: str
    type_name: str
    type_key: str
    is_valid: bool


@dataclass(frozen=True)
class CityData:
    city: str
    state: str
    zip: str


@dataclass(frozen=True)
class CountryData:
    """Lookup tables for one country. ``format`` is a str.format template over
    number, street, city, state, zip and country."""
    name: str
    flag: str
    format: str
    streets: Tuple[str, ...]
    cities: Tuple[CityData, ...]
    phone_format: str
    email_domains: Tuple[str, ...]
    first_names: Tuple[str, ...]
    last_names: Tuple[str, ...]


@dataclass(frozen=True)
class AddressOptions:
    include_name: bool = False
    include_phone: bool = False
    include_email: bool = False


@dataclass(frozen=True)
class GeneratedAddress:
    street: str
    number: str
    city: str
    state: str
    zip: str
    country: str
    country_code: str
    flag: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    full_name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
