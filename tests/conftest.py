import json

import pytest
from fastapi.testclient import TestClient

from services.qris import calculate_crc16, encode_tlv


def build_qris(merchant_name="TOKO MAJU JAYA", initiation="11", extra=""):
    mai = (
        encode_tlv("00", "ID.CO.QRIS.WWW")
        + encode_tlv("01", "936008990000012345")
        + encode_tlv("02", "ID1020012345678")
        + encode_tlv("03", "UMI")
    )
    body = (
        encode_tlv("00", "01")
        + encode_tlv("01", initiation)
        + encode_tlv("26", mai)
        + encode_tlv("52", "5812")
        + encode_tlv("53", "360")
        + extra
        + encode_tlv("58", "ID")
        + encode_tlv("59", merchant_name)
        + encode_tlv("60", "JAKARTA")
        + encode_tlv("61", "12345")
        + "6304"
    )
    return body + calculate_crc16(body)


@pytest.fixture
def make_qris():
    return build_qris


@pytest.fixture
def static_qris():
    return build_qris()


@pytest.fixture
def client():
    from main import app
    with TestClient(app) as c:
        yield c


# BR Code example published in the Banco Central do Brasil Pix manual
EMVCO_SAMPLE = (
    "00020126580014br.gov.bcb.pix0136123e4567-e12b-12d1-a456-426655440000"
    "5204000053039865802BR5913Fulano de Tal6008BRASILIA62070503***63041D3D"
)


@pytest.fixture
def emvco_sample():
    return EMVCO_SAMPLE


COUNTRY_DATA_JSON = {
    "GB": {
        "name": "United Kingdom",
        "flag": "GB",
        "format": "{number} {street}\n{city}\n{state}\n{zip}",
        "streets": ["Baker Street", "Abbey Road"],
        "cities": [{"city": "London", "state": "Greater London", "zip": "SW1A"}],
        "phone_format": "+44 XXXX XXXXXX",
        "email_domains": ["outlook.co.uk"],
        "first_names": ["Oliver", "Amelia"],
        "last_names": ["O'Brien", "Smith"],
    },
    "FR": {
        "name": "France",
        "flag": "FR",
        "format": "{number} {street}\n{zip} {city}\n{country}",
        "streets": ["Rue de Rivoli"],
        "cities": [{"city": "Paris", "state": "Ile-de-France", "zip": "75001"}],
        "phone_format": "+33 X XX XX XX XX",
        "email_domains": ["orange.fr"],
        "first_names": ["Hélène"],
        "last_names": ["Dupré"],
    },
}


@pytest.fixture
def country_data():
    from services.address import parse_country_data
    return parse_country_data(json.dumps(COUNTRY_DATA_JSON))


@pytest.fixture
def country_data_file(tmp_path):
    path = tmp_path / "countries.json"
    path.write_text(json.dumps(COUNTRY_DATA_JSON), encoding="utf-8")
    return str(path)
