"""Read-side queries over the ownership and consent audit trail."""

from __future__ import annotations

from dataclasses import dataclass

from nftsig.app.ports import AuditRecord, LedgerPort
from nftsig.utils.hashing import format_message_hash


@dataclass(slots=True)
class AuditService:
    """Expose history and integrity checks for the audit ledger.

    ``ledger`` is None when auditing is disabled; every query then answers
    empty and verification trivially passes.
    """

    ledger: LedgerPort | None

    def is_enabled(self) -> bool:
        return self.ledger is not None

    def get_entries(self, token_id: int | None = None) -> list[AuditRecord]:
        """Return ledger entries, optionally only those touching ``token_id``."""

        if self.ledger is None:
            return []
        entries = list(self.ledger.read_all())
        if token_id is None:
            return entries
        return [entry for entry in entries if entry.token_id == token_id]

    def consent_history(self, token_id: int, message_hash: bytes | str) -> list[AuditRecord]:
        """Marks and revocations recorded for one (token, hash) pair."""

        wanted = format_message_hash(message_hash)
        return [
            entry
            for entry in self.get_entries(token_id)
            if entry.operation.startswith("consent_") and entry.message_hash == wanted
        ]

    def owners(self, token_id: int) -> list[str]:
        """Successive owners of ``token_id`` according to mint and transfer entries."""

        owners: list[str] = []
        for entry in self.get_entries(token_id):
            if entry.operation == "token_mint" and entry.actor:
                owners.append(entry.actor)
            elif entry.operation == "token_transfer" and entry.args.get("to"):
                owners.append(entry.args["to"])
        return owners

    def verify(self) -> tuple[bool, str | None]:
        """Verify ledger integrity, treating a disabled ledger as valid."""

        if self.ledger is None:
            return True, None
        return self.ledger.verify()
