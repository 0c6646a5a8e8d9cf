import json
import logging
import random
import re
import unicodedata
from functools import lru_cache
from typing import Dict, List, Mapping, Optional, Sequence, TypeVar

from models import AddressOptions, CityData, CountryData, GeneratedAddress

T = TypeVar("T")

HOUSE_SUFFIXES = ("A", "B", "C")
UK_NAME = "United Kingdom"

_combining_re = re.compile(r"[\u0300-\u036f]")
_email_unsafe_re = re.compile(r"[^a-z0-9._]")


def random_item(items: Sequence[T]) -> T:
    return random.choice(items)


def random_digits(count: int) -> str:
    return "".join(str(random.randint(0, 9)) for _ in range(count))


def random_letter() -> str:
    return chr(ord("A") + random.randint(0, 25))


def generate_house_number() -> str:
    number = random.randint(1, 200)
    if random.random() < 0.1:
        return f"{number}{random_item(HOUSE_SUFFIXES)}"
    return str(number)


def generate_zip_code(zip_code: str, country_name: str) -> str:
    """UK outward codes get a random inward part, e.g. "SW1A 4XY"."""
    if not zip_code:
        return ""
    if country_name == UK_NAME:
        return f"{zip_code} {random_digits(1)}{random_letter()}{random_letter()}"
    return zip_code


def generate_phone(phone_format: str) -> str:
    return "".join(str(random.randint(0, 9)) if c == "X" else c for c in phone_format)


def _email_local_part(text: str) -> str:
    text = unicodedata.normalize("NFD", text)
    text = _combining_re.sub("", text)
    return _email_unsafe_re.sub("", text)


def generate_email(first_name: str, last_name: str, domains: Sequence[str]) -> str:
    domain = random_item(domains)
    first = first_name.lower()
    last = last_name.lower()
    patterns = [
        f"{first}{last}",
        f"{first}.{last}",
        f"{first}{random.randint(0, 99)}",
        f"{first[:1]}{last}",
    ]
    return f"{_email_local_part(random_item(patterns))}@{domain}"


def generate_address(country_data: Mapping[str, CountryData], country_code: str,
                     options: Optional[AddressOptions] = None) -> GeneratedAddress:
    """
    Random postal address for `country_code` drawn from `country_data`.

    Name, phone and email are only filled in when requested. The email reuses
    the generated name when there is one, otherwise it is built from a fresh
    random name. Raises ValueError for a country missing from `country_data`.
    """
    options = options or AddressOptions()
    try:
        country = country_data[country_code]
    except KeyError:
        raise ValueError(f"Unknown country: {country_code}") from None

    city = random_item(country.cities)
    fields = {}
    if options.include_name:
        fields["first_name"] = random_item(country.first_names)
        fields["last_name"] = random_item(country.last_names)
        fields["full_name"] = f"{fields['first_name']} {fields['last_name']}"
    if options.include_phone:
        fields["phone"] = generate_phone(country.phone_format)
    if options.include_email:
        first = fields.get("first_name") or random_item(country.first_names)
        last = fields.get("last_name") or random_item(country.last_names)
        fields["email"] = generate_email(first, last, country.email_domains)

    return GeneratedAddress(
        street=random_item(country.streets),
        number=generate_house_number(),
        city=city.city,
        state=city.state,
        zip=generate_zip_code(city.zip, country.name),
        country=country.name,
        country_code=country_code,
        flag=country.flag,
        **fields,
    )


def generate_addresses(country_data: Mapping[str, CountryData], country_code: str, quantity: int,
                       options: Optional[AddressOptions] = None) -> List[GeneratedAddress]:
    return [generate_address(country_data, country_code, options) for _ in range(quantity)]


def format_address(address: GeneratedAddress, country: CountryData) -> str:
    return country.format.format(
        number=address.number,
        street=address.street,
        city=address.city,
        state=address.state,
        zip=address.zip,
        country=address.country,
    )


def _country_from_dict(raw: dict) -> CountryData:
    return CountryData(
        name=raw["name"],
        flag=raw.get("flag", ""),
        format=raw["format"],
        streets=tuple(raw["streets"]),
        cities=tuple(CityData(**c) for c in raw["cities"]),
        phone_format=raw["phone_format"],
        email_domains=tuple(raw["email_domains"]),
        first_names=tuple(raw["first_names"]),
        last_names=tuple(raw["last_names"]),
    )


def parse_country_data(text: str) -> Dict[str, CountryData]:
    """Country tables from JSON keyed by country code. Raises ValueError when malformed."""
    try:
        raw = json.loads(text)
        return {code: _country_from_dict(entry) for code, entry in raw.items()}
    except (AttributeError, KeyError, TypeError) as e:
        raise ValueError(f"Malformed country data: {e}") from e


@lru_cache(maxsize=4)
def load_country_data(path: str) -> Dict[str, CountryData]:
    with open(path, encoding="utf-8") as f:
        data = parse_country_data(f.read())
    logging.info(f"Loaded address data for {len(data)} countries from {path}")
    return data
