from typing import List, Optional, Tuple
from models import Account
from services.google_auth import parse_migration_uri, generate_migration_uris, MIGRATION_PREFIX
from services.import_export import parse_aegis_json, export_to_aegis_json
from services.totp_service import parse_otpauth_uri, build_otpauth_uri
from services.validator import validate_account


class ImportExportService:
    @staticmethod
    def import_accounts(text: str) -> Tuple[List[Account], Optional[str]]:
        """
        Import accounts from an Aegis JSON vault or from otpauth-migration://
        and otpauth:// URIs, one per line.
        Returns: (accounts, error_message)
        """
        text = (text or "").strip()
        if not text:
            return [], "Nothing to import."

        if text.startswith("{"):
            accounts = parse_aegis_json(text)
            if not accounts:
                return [], "Invalid Aegis backup or no TOTP entries found."
            return accounts, None

        accounts: List[Account] = []
        for line in text.splitlines():
            line = line.strip()
            if not line:
                continue
            parsed, error = ImportExportService._parse_line(line)
            if error:
                return [], error
            accounts.extend(parsed)

        if not accounts:
            return [], "No TOTP accounts found."
        return accounts, None

    @staticmethod
    def _parse_line(line: str) -> Tuple[List[Account], Optional[str]]:
        if line.startswith(MIGRATION_PREFIX):
            accounts = parse_migration_uri(line)
            if accounts is None:
                return [], "Invalid Google Authenticator migration URI."
            return accounts, None
        if line.startswith("otpauth://"):
            account = parse_otpauth_uri(line)
            if account is None:
                return [], f"Unsupported URI: {line}"
            return [account], None
        return [], f"Unsupported URI: {line}"

    @staticmethod
    def merge(existing: List[Account], incoming: List[Account]) -> Tuple[List[Account], int]:
        """
        Append imported accounts, skipping names already present (case-insensitive).
        Returns: (merged, created_count)
        """
        merged = list(existing)
        created = 0
        for account in incoming:
            if validate_account(account.name, account.secret, [a.name for a in merged]):
                continue
            merged.append(account)
            created += 1
        return merged, created

    @staticmethod
    def export_accounts(accounts: List[Account], fmt: str):
        if fmt == "google":
            return generate_migration_uris(accounts)
        if fmt == "aegis":
            return export_to_aegis_json(accounts)
        if fmt == "uri":
            return [build_otpauth_uri(a) for a in accounts]
        raise ValueError(f"Unknown export format: {fmt}")
