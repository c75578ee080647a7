"""Token ownership registries (in-memory and JSON-file backed)."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from pathlib import Path

from nftsig.app.ports import OwnershipPort, TokenRecord
from nftsig.errors import TokenExistsError, UnknownTokenError
from nftsig.utils.jsonio import atomic_write_json, read_json
from nftsig.utils.validation import normalize_address, require_token_id

logger = logging.getLogger(__name__)

REGISTRY_SCHEMA_ID = "token_registry"
REGISTRY_SCHEMA_VERSION = 1


def _now() -> str:
    return datetime.now(UTC).isoformat()


class InMemoryTokenRegistry(OwnershipPort):
    """Ownership map held in process memory."""

    def __init__(self, records: dict[int, TokenRecord] | None = None) -> None:
        self._tokens: dict[int, TokenRecord] = dict(records or {})

    def owner_of(self, token_id: int) -> str:
        record = self._tokens.get(require_token_id(token_id))
        if record is None:
            raise UnknownTokenError(token_id)
        return record.owner

    def mint(self, token_id: int, owner: str) -> TokenRecord:
        require_token_id(token_id)
        if token_id in self._tokens:
            raise TokenExistsError(token_id)

        timestamp = _now()
        record = TokenRecord(
            token_id=token_id,
            owner=normalize_address(owner),
            minted_at=timestamp,
            updated_at=timestamp,
        )
        self._tokens[token_id] = record
        self._persist()
        logger.debug("Minted token %d to %s", token_id, record.owner)
        return record

    def transfer(self, token_id: int, new_owner: str) -> TokenRecord:
        current = self._tokens.get(require_token_id(token_id))
        if current is None:
            raise UnknownTokenError(token_id)

        record = current.model_copy(
            update={"owner": normalize_address(new_owner), "updated_at": _now()}
        )
        self._tokens[token_id] = record
        self._persist()
        logger.debug("Transferred token %d from %s to %s", token_id, current.owner, record.owner)
        return record

    def list_tokens(self) -> list[TokenRecord]:
        return [self._tokens[token_id] for token_id in sorted(self._tokens)]

    def _persist(self) -> None:
        """Hook for durable subclasses."""


class JsonTokenRegistry(InMemoryTokenRegistry):
    """Registry persisted as a schema-stamped JSON document.

    Token ids are stored as decimal strings since uint256 values exceed
    JSON's safe integer range.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        super().__init__(self._load())

    def _load(self) -> dict[int, TokenRecord]:
        data = read_json(
            self.path, schema_id=REGISTRY_SCHEMA_ID, schema_version=REGISTRY_SCHEMA_VERSION
        )
        if data is None:
            return {}

        records: dict[int, TokenRecord] = {}
        try:
            for raw in data.get("tokens", []):
                record = TokenRecord(
                    token_id=int(raw["token_id"]),
                    owner=raw["owner"],
                    minted_at=raw["minted_at"],
                    updated_at=raw["updated_at"],
                )
                records[record.token_id] = record
        except (KeyError, TypeError) as exc:
            raise ValueError(f"Malformed token entry in {self.path}: {exc!r}") from exc
        return records

    def _persist(self) -> None:
        tokens = [
            {**record.model_dump(mode="json"), "token_id": str(record.token_id)}
            for record in self.list_tokens()
        ]
        atomic_write_json(
            self.path,
            {"tokens": tokens},
            schema_id=REGISTRY_SCHEMA_ID,
            schema_version=REGISTRY_SCHEMA_VERSION,
        )
