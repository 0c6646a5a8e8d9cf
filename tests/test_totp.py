import pyotp
import pytest

from models import Account
from services.totp_service import (
    InvalidSecret, TotpService, build_otpauth_uri, format_secret, generate_totp, hotp,
    is_valid_secret, parse_otpauth_uri, remaining_seconds,
)

RFC6238_SECRET = "GEZDGNBVGY3TQOJQGEZDGNBVGY3TQOJQ"


@pytest.mark.parametrize("seconds, expected", [
    (59, "94287082"),
    (1111111109, "07081804"),
    (1111111111, "14050471"),
    (1234567890, "89005924"),
    (2000000000, "69279037"),
    (20000000000, "65353130"),
])
def test_rfc6238_sha1_vectors(seconds, expected):
    assert generate_totp(RFC6238_SECRET, digits=8, period=30, timestamp=seconds * 1000) == expected


@pytest.mark.parametrize("counter, expected", enumerate([
    "755224", "287082", "359152", "969429", "338314",
    "254676", "287922", "162583", "399871", "520489",
]))
def test_rfc4226_hotp_vectors(counter, expected):
    assert hotp(RFC6238_SECRET, counter) == expected


def test_matches_pyotp_reference():
    secret = pyotp.random_base32()
    for seconds in (0, 29, 30, 1700000000, 1700000029):
        assert generate_totp(secret, timestamp=seconds * 1000) == pyotp.TOTP(secret).at(seconds)


def test_code_is_stable_within_period():
    assert generate_totp(RFC6238_SECRET, timestamp=30000) == generate_totp(RFC6238_SECRET, timestamp=59999)


def test_counter_wraps_to_64_bits():
    assert hotp(RFC6238_SECRET, -1) == hotp(RFC6238_SECRET, 2 ** 64 - 1)
    assert hotp(RFC6238_SECRET, 2 ** 64 + 1) == "287082"


def test_negative_timestamp_still_yields_a_code():
    code = generate_totp(RFC6238_SECRET, timestamp=-1000)
    assert code == hotp(RFC6238_SECRET, 2 ** 64 - 1)
    assert len(code) == 6 and code.isdigit()


def test_code_is_zero_padded():
    code = generate_totp(RFC6238_SECRET, digits=8, timestamp=1111111109000)
    assert code == "07081804"
    assert len(code) == 8


def test_secret_normalization_does_not_change_code():
    assert generate_totp("gezd gnbv gy3t qojq gezd gnbv gy3t qojq", timestamp=59000) == \
        generate_totp(RFC6238_SECRET, timestamp=59000)


@pytest.mark.parametrize("secret", ["NOT-BASE32!", "ABC1", "", "===="])
def test_invalid_secret_raises(secret):
    with pytest.raises(InvalidSecret):
        generate_totp(secret, timestamp=0)


@pytest.mark.parametrize("timestamp, expected", [
    (0, 30),
    (59000, 1),
    (60000, 30),
    (29999, 1),
    (45500, 15),
])
def test_remaining_seconds(timestamp, expected):
    assert remaining_seconds(30, timestamp) == expected


def test_remaining_seconds_uses_wall_clock_by_default():
    assert 1 <= remaining_seconds() <= 30


def test_is_valid_secret():
    assert is_valid_secret("JBSWY3DPEHPK3PXP")
    assert is_valid_secret("jbsw y3dp ehpk 3pxp====")
    assert not is_valid_secret("")
    assert not is_valid_secret("   ")
    assert not is_valid_secret("JBSW1")
    assert not is_valid_secret(None)


def test_format_secret():
    assert format_secret("jbswy3dpehpk3pxp") == "JBSW Y3DP EHPK 3PXP"
    assert format_secret("JBSWY") == "JBSW Y"


def test_parse_otpauth_uri_strips_issuer_prefix():
    account = parse_otpauth_uri(
        "otpauth://totp/GitHub:alice%40example.com?secret=jbswy3dpehpk3pxp&issuer=GitHub"
    )
    assert account == Account(name="alice@example.com", secret="JBSWY3DPEHPK3PXP", issuer="GitHub")


def test_parse_otpauth_uri_defaults_name():
    account = parse_otpauth_uri("otpauth://totp/?secret=JBSWY3DPEHPK3PXP")
    assert account.name == "Imported Account"
    assert account.issuer is None


@pytest.mark.parametrize("uri", [
    "otpauth://hotp/Example?secret=JBSWY3DPEHPK3PXP&counter=1",
    "otpauth://totp/Example",
    "otpauth://totp/Example?secret=ABC1",
    "https://example.com",
    "",
])
def test_parse_otpauth_uri_rejects(uri):
    assert parse_otpauth_uri(uri) is None


def test_build_otpauth_uri_round_trips():
    account = Account(name="alice@example.com", secret="JBSWY3DPEHPK3PXP", issuer="GitHub")
    uri = build_otpauth_uri(account)
    assert uri.startswith("otpauth://totp/GitHub:alice%40example.com?")
    assert parse_otpauth_uri(uri) == account


def test_codes_for_marks_broken_accounts():
    accounts = [
        Account(name="good", secret=RFC6238_SECRET),
        Account(name="bad", secret="ABC1"),
    ]
    codes = TotpService.codes_for(accounts, timestamp=59000)
    assert codes[0]["code"] == "287082"
    assert codes[0]["remaining"] == 1
    assert codes[1]["code"] == "Error"


def test_code_for():
    result = TotpService.code_for(RFC6238_SECRET, digits=8, timestamp=59000)
    assert result == {"code": "94287082", "remaining": 1, "period": 30}
