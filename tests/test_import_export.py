import json

import pytest

from models import Account
from services.google_auth import generate_migration_uris
from services.import_export import export_to_aegis_json, parse_aegis_json
from services.import_export_service import ImportExportService

ALICE = Account(name="alice", secret="JBSWY3DPEHPK3PXP", issuer="GitHub")
BOB = Account(name="bob", secret="GEZDGNBVGY3TQOJQ", issuer=None)


def test_aegis_export_layout():
    vault = json.loads(export_to_aegis_json([ALICE, BOB]))
    assert vault["version"] == 2
    assert vault["header"] == {"slots": None, "params": None}
    assert vault["db"]["version"] == 2
    first, second = vault["db"]["entries"]
    assert first["type"] == "totp"
    assert first["name"] == "alice"
    assert first["issuer"] == "GitHub"
    assert first["info"] == {"secret": "JBSWY3DPEHPK3PXP", "algo": "SHA1", "digits": 6, "period": 30}
    assert second["issuer"] == "bob"
    assert first["uuid"] != second["uuid"]


def test_aegis_round_trip():
    assert parse_aegis_json(export_to_aegis_json([ALICE])) == [ALICE]


def test_aegis_parse_filters_and_normalizes():
    vault = {"db": {"entries": [
        {"type": "hotp", "name": "counter", "info": {"secret": "JBSWY3DPEHPK3PXP"}},
        {"type": "totp", "name": "nosecret", "info": {}},
        {"type": "totp", "name": "", "issuer": "Bank", "info": {"secret": "jbsw y3dp ehpk 3pxp"}},
        {"type": "totp", "info": {"secret": "GEZDGNBV"}},
    ]}}
    assert parse_aegis_json(json.dumps(vault)) == [
        Account(name="Bank", secret="JBSWY3DPEHPK3PXP", issuer="Bank"),
        Account(name="Imported Account", secret="GEZDGNBV", issuer=None),
    ]


@pytest.mark.parametrize("text", [
    "not json",
    "[]",
    '{"db": {}}',
    '{"db": {"entries": "x"}}',
    '{"db": {"entries": [{"type": "hotp", "info": {"secret": "AAAA"}}]}}',
])
def test_aegis_parse_failures_return_none(text):
    assert parse_aegis_json(text) is None


def test_import_migration_and_otpauth_lines():
    uris = generate_migration_uris([ALICE])
    text = "\n".join(uris + ["", "otpauth://totp/Mail:carol?secret=GEZDGNBV&issuer=Mail"])
    accounts, error = ImportExportService.import_accounts(text)
    assert error is None
    assert accounts == [ALICE, Account(name="carol", secret="GEZDGNBV", issuer="Mail")]


def test_import_aegis():
    accounts, error = ImportExportService.import_accounts(export_to_aegis_json([ALICE, BOB]))
    assert error is None
    assert [a.name for a in accounts] == ["alice", "bob"]


@pytest.mark.parametrize("text, message", [
    ("", "Nothing to import."),
    ("hello", "Unsupported URI: hello"),
    ("otpauth-migration://offline?data=%%%", "Invalid Google Authenticator migration URI."),
    ('{"db": {"entries": []}}', "Invalid Aegis backup or no TOTP entries found."),
])
def test_import_errors(text, message):
    accounts, error = ImportExportService.import_accounts(text)
    assert accounts == []
    assert error == message


def test_merge_skips_existing_names():
    merged, created = ImportExportService.merge([ALICE], [Account("ALICE", "GEZDGNBV"), BOB])
    assert created == 1
    assert merged == [ALICE, BOB]


def test_export_accounts_formats():
    assert ImportExportService.export_accounts([ALICE], "google")[0].startswith("otpauth-migration://")
    assert json.loads(ImportExportService.export_accounts([ALICE], "aegis"))["db"]["entries"]
    assert ImportExportService.export_accounts([ALICE], "uri")[0].startswith("otpauth://totp/")
    with pytest.raises(ValueError):
        ImportExportService.export_accounts([ALICE], "csv")
