import json
import logging
import uuid
from typing import List, Optional

from constants import AppConstants
from models import Account
from utils import strip_whitespace

AEGIS_VERSION = 2


def export_to_aegis_json(accounts: List[Account]) -> str:
    """Plain-text (unencrypted) Aegis Authenticator vault."""
    vault = {
        "version": AEGIS_VERSION,
        "header": {"slots": None, "params": None},
        "db": {
            "version": AEGIS_VERSION,
            "entries": [
                {
                    "type": "totp",
                    "uuid": str(uuid.uuid4()),
                    "name": acc.name,
                    "issuer": acc.issuer or acc.name,
                    "note": "",
                    "favorite": False,
                    "icon": None,
                    "info": {
                        "secret": acc.secret,
                        "algo": "SHA1",
                        "digits": AppConstants.DEFAULT_DIGITS,
                        "period": AppConstants.DEFAULT_PERIOD,
                    },
                }
                for acc in accounts
            ],
        },
    }
    return json.dumps(vault, indent=2)


def parse_aegis_json(text: str) -> Optional[List[Account]]:
    """
    Read TOTP entries from a plain-text Aegis vault.
    Returns None when the text is not a vault or holds no usable entry.
    """
    try:
        data = json.loads(text)
    except (TypeError, ValueError) as e:
        logging.debug(f"Not an Aegis vault: {e}")
        return None

    db = data.get("db") if isinstance(data, dict) else None
    entries = db.get("entries") if isinstance(db, dict) else None
    if not isinstance(entries, list):
        return None

    accounts = []
    for entry in entries:
        if not isinstance(entry, dict) or entry.get("type") != "totp":
            continue
        info = entry.get("info")
        secret = info.get("secret") if isinstance(info, dict) else None
        if not secret or not isinstance(secret, str):
            continue
        accounts.append(Account(
            name=entry.get("name") or entry.get("issuer") or AppConstants.DEFAULT_ACCOUNT_NAME,
            secret=strip_whitespace(secret).upper(),
            issuer=entry.get("issuer") or None,
        ))
    return accounts or None
