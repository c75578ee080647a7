"""Append-only, hash-chained ledger of ownership and consent changes."""

from __future__ import annotations

import hashlib
import hmac
import json
import logging
import os
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from pydantic import Field

from nftsig import __version__
from nftsig.app.ports.ledger import AuditRecord

logger = logging.getLogger(__name__)

GENESIS_HASH = "0" * 64
GENESIS_SIGNATURE = "0" * 64


class AuditEntry(AuditRecord):
    """Single ledger entry.

    Each entry commits to its predecessor through ``previous_hash`` and is
    sealed with an HMAC chained over the previous signature.
    """

    version: str = Field(default=__version__, description="nftsig version that wrote the entry")
    previous_hash: str = Field(default=GENESIS_HASH, description="entry_hash of the predecessor")
    sequence: int = Field(default=1, ge=1, description="Monotonic sequence number from 1")
    entry_hash: str | None = Field(default=None, description="SHA-256 of the entry content")
    signature: str | None = Field(default=None, description="HMAC seal")

    def compute_hash(self) -> str:
        """SHA-256 over canonical JSON, excluding ``entry_hash`` and ``signature``."""
        data = self.model_dump(mode="json", exclude={"entry_hash", "signature"})
        # uint256 ids exceed JSON's safe integer range on other readers.
        if data["token_id"] is not None:
            data["token_id"] = str(data["token_id"])
        content = json.dumps(data, sort_keys=True, separators=(",", ":"))
        return hashlib.sha256(content.encode("utf-8")).hexdigest()

    def model_post_init(self, __context: Any) -> None:
        if self.entry_hash is None:
            self.entry_hash = self.compute_hash()


class AuditLedger:
    """JSONL audit ledger with tamper evidence.

    A sidecar ``.meta`` file records the sequence and hash of the tip so that
    truncation of trailing entries is detected by :meth:`verify`.
    """

    def __init__(self, ledger_path: Path, *, hmac_key: bytes) -> None:
        self.ledger_path = ledger_path
        self.ledger_path.parent.mkdir(parents=True, exist_ok=True)
        self._metadata_path = ledger_path.with_suffix(".meta")
        self._hmac_key = hmac_key

        self._last_hash = GENESIS_HASH
        self._last_sequence = 0
        self._last_signature = GENESIS_SIGNATURE

        entries = self._read_entries()
        if entries:
            tip = entries[-1]
            self._last_hash = tip.entry_hash or GENESIS_HASH
            self._last_sequence = tip.sequence
            self._last_signature = tip.signature or GENESIS_SIGNATURE

    # ---------------------------------------------------------------------#
    # Internal helpers
    # ---------------------------------------------------------------------#

    def _read_entries(self) -> list[AuditEntry]:
        if not self.ledger_path.exists():
            return []

        entries: list[AuditEntry] = []
        with open(self.ledger_path, encoding="utf-8") as fh:
            for line_num, raw_line in enumerate(fh, 1):
                line = raw_line.strip()
                if not line:
                    continue
                try:
                    entries.append(AuditEntry.model_validate_json(line))
                except ValueError as exc:
                    raise ValueError(
                        f"Invalid entry at line {line_num} in {self.ledger_path}: {exc}"
                    ) from exc
        return entries

    def _seal(self, entry: AuditEntry, previous_signature: str) -> str:
        payload = "|".join(
            [str(entry.sequence), entry.previous_hash, entry.entry_hash or "", previous_signature]
        ).encode("utf-8")
        return hmac.new(self._hmac_key, payload, hashlib.sha256).hexdigest()

    def _metadata_hmac(self, last_sequence: int, last_hash: str) -> str:
        payload = f"{last_sequence}:{last_hash}".encode("utf-8")
        return hmac.new(self._hmac_key, payload, hashlib.sha256).hexdigest()

    def _write_metadata(self, last_sequence: int, last_hash: str) -> None:
        payload = {
            "version": 1,
            "last_sequence": last_sequence,
            "last_hash": last_hash,
            "hmac": self._metadata_hmac(last_sequence, last_hash),
        }
        data = json.dumps(payload, sort_keys=True, separators=(",", ":")).encode("utf-8")

        fd = os.open(self._metadata_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        try:
            os.write(fd, data)
            os.fsync(fd)
        finally:
            os.close(fd)

    def _load_metadata(self) -> dict[str, Any] | None:
        try:
            data = json.loads(self._metadata_path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return None

        expected = self._metadata_hmac(
            int(data.get("last_sequence", 0)), data.get("last_hash") or GENESIS_HASH
        )
        actual = data.get("hmac")
        if not isinstance(actual, str) or not hmac.compare_digest(expected, actual):
            raise ValueError("Audit metadata HMAC mismatch")
        return data

    # ---------------------------------------------------------------------#
    # Public API
    # ---------------------------------------------------------------------#

    def log(
        self,
        operation: str,
        *,
        token_id: int | None = None,
        message_hash: str | None = None,
        actor: str | None = None,
        args: dict[str, Any] | None = None,
    ) -> AuditEntry:
        """Append an entry and advance the chain tip.

        Args:
            operation: Operation name
            token_id: Token affected by the operation
            message_hash: Message hash affected, for consent operations
            actor: Address that performed the operation
            args: Extra parameters worth keeping

        Returns:
            The sealed entry
        """
        entry = AuditEntry(
            timestamp=datetime.now(UTC).isoformat(),
            operation=operation,
            token_id=token_id,
            message_hash=message_hash,
            actor=actor,
            args=args or {},
            previous_hash=self._last_hash,
            sequence=self._last_sequence + 1,
        )
        entry.signature = self._seal(entry, self._last_signature)

        with open(self.ledger_path, "a", encoding="utf-8") as fh:
            fh.write(entry.model_dump_json() + "\n")
            fh.flush()
            os.fsync(fh.fileno())

        self._last_sequence = entry.sequence
        self._last_hash = entry.entry_hash or GENESIS_HASH
        self._last_signature = entry.signature
        self._write_metadata(entry.sequence, self._last_hash)

        logger.debug("Ledger #%d %s token=%s", entry.sequence, operation, token_id)
        return entry

    def read_all(self) -> list[AuditEntry]:
        """Return all entries in chronological order."""
        return self._read_entries()

    def verify(self) -> tuple[bool, str | None]:
        """Check the hash chain, seals, sequence numbers and tip metadata.

        Returns:
            Tuple of (is_valid, error_message). error_message is None if valid.
        """
        try:
            metadata = self._load_metadata()
            entries = self._read_entries()
        except ValueError as exc:
            return False, f"Audit ledger integrity failure: {exc}"

        expected_tip = int(metadata.get("last_sequence", 0)) if metadata else 0
        if not entries:
            if expected_tip > 0:
                return False, "Audit ledger appears truncated (no entries but metadata expects data)."
            return True, None

        previous_hash = GENESIS_HASH
        previous_signature = GENESIS_SIGNATURE

        for idx, entry in enumerate(entries, 1):
            if entry.sequence != idx:
                return False, f"Entry {idx} sequence mismatch (got {entry.sequence})."

            expected_hash = entry.compute_hash()
            if entry.entry_hash is None or not hmac.compare_digest(entry.entry_hash, expected_hash):
                return False, f"Entry {idx} has invalid hash; ledger corrupted or tampered."

            if entry.previous_hash != previous_hash:
                return False, f"Entry {idx} breaks hash chain."

            expected_signature = self._seal(entry, previous_signature)
            if entry.signature is None or not hmac.compare_digest(
                entry.signature, expected_signature
            ):
                return False, f"Entry {idx} has invalid signature; ledger may have been tampered."

            previous_hash = entry.entry_hash
            previous_signature = entry.signature

        if metadata is None:
            return False, "Audit metadata file is missing."

        tip = entries[-1]
        if expected_tip != tip.sequence or metadata.get("last_hash") != tip.entry_hash:
            return False, "Ledger metadata does not match the last entry; possible truncation."

        return True, None

    def get_by_operation(self, operation: str) -> list[AuditEntry]:
        """Entries recorded for ``operation``."""
        return [entry for entry in self.read_all() if entry.operation == operation]

    def get_by_token(self, token_id: int) -> list[AuditEntry]:
        """Entries that touched ``token_id``."""
        return [entry for entry in self.read_all() if entry.token_id == token_id]
