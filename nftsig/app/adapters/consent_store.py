"""Consent stores keyed by (token id, message hash)."""

from __future__ import annotations

import logging
from pathlib import Path

from nftsig.app.ports import ConsentRecord, ConsentStorePort
from nftsig.utils.hashing import format_message_hash
from nftsig.utils.jsonio import atomic_write_json, read_json
from nftsig.utils.validation import require_token_id

logger = logging.getLogger(__name__)

CONSENT_SCHEMA_ID = "consent_store"
CONSENT_SCHEMA_VERSION = 1

ConsentKey = tuple[int, str]


def _key(token_id: int, message_hash: bytes | str) -> ConsentKey:
    return require_token_id(token_id), format_message_hash(message_hash)


class InMemoryConsentStore(ConsentStorePort):
    """Consent flags held in process memory.

    Alongside the flags the store counts revocations per pair. The count is
    bound into signed consent so a withdrawn authorization cannot be replayed.
    """

    def __init__(
        self,
        records: dict[ConsentKey, ConsentRecord] | None = None,
        epochs: dict[ConsentKey, int] | None = None,
    ) -> None:
        self._consents: dict[ConsentKey, ConsentRecord] = dict(records or {})
        self._epochs: dict[ConsentKey, int] = dict(epochs or {})

    def mark(self, record: ConsentRecord) -> ConsentRecord:
        key = _key(record.token_id, record.message_hash)
        existing = self._consents.get(key)
        if existing is not None:
            logger.debug("Consent for token %d hash %s already marked", *key)
            return existing

        stored = record.model_copy(update={"message_hash": key[1]})
        self._consents[key] = stored
        self._persist()
        return stored

    def get(self, token_id: int, message_hash: bytes | str) -> ConsentRecord | None:
        return self._consents.get(_key(token_id, message_hash))

    def has_consent(self, token_id: int, message_hash: bytes | str) -> bool:
        return _key(token_id, message_hash) in self._consents

    def revoke(self, token_id: int, message_hash: bytes | str) -> bool:
        key = _key(token_id, message_hash)
        removed = self._consents.pop(key, None)
        if removed is None:
            return False
        self._epochs[key] = self._epochs.get(key, 0) + 1
        self._persist()
        return True

    def revoke_all(self, token_id: int) -> int:
        require_token_id(token_id)
        doomed = [key for key in self._consents if key[0] == token_id]
        for key in doomed:
            del self._consents[key]
            self._epochs[key] = self._epochs.get(key, 0) + 1
        if doomed:
            self._persist()
        return len(doomed)

    def epoch(self, token_id: int, message_hash: bytes | str) -> int:
        return self._epochs.get(_key(token_id, message_hash), 0)

    def list_for_token(self, token_id: int) -> list[ConsentRecord]:
        require_token_id(token_id)
        return [
            record
            for key, record in sorted(self._consents.items())
            if key[0] == token_id
        ]

    def _persist(self) -> None:
        """Hook for durable subclasses."""


class JsonConsentStore(InMemoryConsentStore):
    """Consent store persisted as a schema-stamped JSON document."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        super().__init__(*self._load())

    def _load(self) -> tuple[dict[ConsentKey, ConsentRecord], dict[ConsentKey, int]]:
        data = read_json(
            self.path, schema_id=CONSENT_SCHEMA_ID, schema_version=CONSENT_SCHEMA_VERSION
        )
        if data is None:
            return {}, {}

        records: dict[ConsentKey, ConsentRecord] = {}
        epochs: dict[ConsentKey, int] = {}
        try:
            for raw in data.get("consents", []):
                record = ConsentRecord.model_validate({**raw, "token_id": int(raw["token_id"])})
                records[_key(record.token_id, record.message_hash)] = record
            for raw in data.get("epochs", []):
                epochs[_key(int(raw["token_id"]), raw["message_hash"])] = int(raw["epoch"])
        except (KeyError, TypeError) as exc:
            raise ValueError(f"Malformed consent entry in {self.path}: {exc!r}") from exc
        return records, epochs

    def _persist(self) -> None:
        consents = [
            {**record.model_dump(mode="json"), "token_id": str(record.token_id)}
            for _, record in sorted(self._consents.items())
        ]
        epochs = [
            {"token_id": str(token_id), "message_hash": message_hash, "epoch": epoch}
            for (token_id, message_hash), epoch in sorted(self._epochs.items())
        ]
        atomic_write_json(
            self.path,
            {"consents": consents, "epochs": epochs},
            schema_id=CONSENT_SCHEMA_ID,
            schema_version=CONSENT_SCHEMA_VERSION,
        )
