# Application constants
import os
from dotenv import load_dotenv

load_dotenv()

class AppConstants:
    # TOTP defaults
    DEFAULT_DIGITS = 6
    DEFAULT_PERIOD = 30

    # Account validation
    MAX_ACCOUNT_LENGTH = 64
    MAX_ISSUER_LENGTH = 64
    DEFAULT_ACCOUNT_NAME = "Imported Account"

    # Google Authenticator export
    ACCOUNTS_PER_QR = int(os.getenv("ACCOUNTS_PER_QR", "10"))

    # Card generator
    MIN_CARD_QUANTITY = 1
    MAX_CARD_QUANTITY = 100
    MAX_BIN_LENGTH = 14

    # Address generator
    MIN_ADDRESS_QUANTITY = 1
    MAX_ADDRESS_QUANTITY = 50

    # QRIS
    MIN_QRIS_LENGTH = 50

    # QR generator
    MAX_QR_TEXT_LENGTH = 2953
