import pytest

from services.validator import (
    validate_account, validate_address_request, validate_card_number, validate_card_request, validate_issuer,
    validate_qr_text, validate_qris_conversion,
)


def test_validate_account():
    assert validate_account("alice", "JBSWY3DPEHPK3PXP") is None
    assert validate_account("  ", "JBSWY3DPEHPK3PXP") == "Please enter an account name"
    assert validate_account("alice", "JBSW1") == "Invalid secret key format"
    assert validate_account("x" * 65, "JBSWY3DPEHPK3PXP").startswith("Account name is too long")
    assert validate_account("Alice", "JBSWY3DPEHPK3PXP", ["alice"]) == "Account already exists"


def test_validate_issuer():
    assert validate_issuer(None) is None
    assert validate_issuer("GitHub") is None
    assert validate_issuer("x" * 65).startswith("Issuer is too long")


@pytest.mark.parametrize("quantity, bin_number, error", [
    (10, "411111", None),
    (0, "411111", "Quantity must be between 1 and 100"),
    (101, "411111", "Quantity must be between 1 and 100"),
    (5, "", "Please enter a BIN number"),
    (5, None, "Please enter a BIN number"),
    (5, "4" * 15, "Invalid BIN format. Use 1-14 digits."),
])
def test_validate_card_request(quantity, bin_number, error):
    assert validate_card_request(quantity, bin_number) == error


def test_validate_card_number():
    assert validate_card_number("4111 1111 1111 1111") is None
    assert validate_card_number("4111-1111") == "Please enter a valid card number"
    assert validate_card_number("") == "Please enter a valid card number"


def test_validate_qris_conversion(static_qris):
    assert validate_qris_conversion(static_qris, 1000) is None
    assert validate_qris_conversion(static_qris, 0) == "Please enter a valid amount"
    assert validate_qris_conversion("garbage", 1000) == "Please provide a valid QRIS first"
    assert validate_qris_conversion(static_qris.replace("JAKARTA", "BANDUNG"), 1000) == \
        "Please provide a valid QRIS first"


def test_validate_qr_text():
    assert validate_qr_text("hello") is None
    assert validate_qr_text("   ") == "Please enter text to generate QR code"
    assert validate_qr_text("x" * 3000).startswith("Text is too long")


@pytest.mark.parametrize("quantity, country, error", [
    (1, "GB", None),
    (50, "GB", None),
    (0, "GB", "Quantity must be between 1 and 50"),
    (51, "GB", "Quantity must be between 1 and 50"),
    (5, "", "Please select a country"),
    (5, "XX", "Unknown country: XX"),
])
def test_validate_address_request(quantity, country, error):
    assert validate_address_request(quantity, country, ["GB", "FR"]) == error
