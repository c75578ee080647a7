"""Tests for JSON-backed registry and consent adapters."""

import json
from pathlib import Path

import pytest

from nftsig.app.adapters import JsonConsentStore, JsonTokenRegistry
from nftsig.app.ports import ConsentRecord
from nftsig.utils.schema import SchemaValidationError

HASH_H = "0x" + "11" * 32
BIG_ID = 2**256 - 1


def _consent(token_id: int, message_hash: str, owner: str) -> ConsentRecord:
    return ConsentRecord(
        token_id=token_id,
        message_hash=message_hash,
        marked_by=owner,
        marked_at="2026-01-01T00:00:00+00:00",
    )


def test_registry_persists_across_instances(temp_dir: Path, owner: str, other: str):
    path = temp_dir / "tokens.json"
    registry = JsonTokenRegistry(path)
    registry.mint(BIG_ID, owner)
    registry.transfer(BIG_ID, other)

    reloaded = JsonTokenRegistry(path)
    assert reloaded.owner_of(BIG_ID) == other

    document = json.loads(path.read_text())
    assert document["schema_id"] == "token_registry"
    assert document["schema_version"] == 1
    assert document["tokens"][0]["token_id"] == str(BIG_ID)


def test_registry_rejects_foreign_document(temp_dir: Path):
    path = temp_dir / "tokens.json"
    path.write_text(json.dumps({"schema_id": "something_else", "schema_version": 1}))

    with pytest.raises(SchemaValidationError):
        JsonTokenRegistry(path)


def test_consent_store_persists(temp_dir: Path, owner: str):
    path = temp_dir / "consents.json"
    store = JsonConsentStore(path)
    store.mark(_consent(BIG_ID, HASH_H, owner))

    reloaded = JsonConsentStore(path)
    assert reloaded.has_consent(BIG_ID, bytes.fromhex("11" * 32))
    assert reloaded.get(BIG_ID, HASH_H).marked_by == owner
    assert not reloaded.has_consent(1, HASH_H)


def test_consent_store_reads_do_not_write(temp_dir: Path, owner: str):
    path = temp_dir / "consents.json"

    empty = JsonConsentStore(path)
    assert not empty.has_consent(1, HASH_H)
    assert empty.list_for_token(1) == []
    assert not path.exists()

    empty.mark(_consent(1, HASH_H, owner))
    snapshot = path.read_bytes()
    JsonConsentStore(path).has_consent(1, HASH_H)
    assert path.read_bytes() == snapshot


def test_consent_store_revoke_all(temp_dir: Path, owner: str):
    store = JsonConsentStore(temp_dir / "consents.json")
    store.mark(_consent(1, "0x" + "01" * 32, owner))
    store.mark(_consent(1, "0x" + "02" * 32, owner))
    store.mark(_consent(2, "0x" + "01" * 32, owner))

    assert store.revoke_all(1) == 2
    assert store.list_for_token(1) == []
    assert len(JsonConsentStore(temp_dir / "consents.json").list_for_token(2)) == 1


def test_consent_store_epochs_survive_reload(temp_dir: Path, owner: str):
    path = temp_dir / "consents.json"
    store = JsonConsentStore(path)
    store.mark(_consent(1, HASH_H, owner))
    assert store.epoch(1, HASH_H) == 0

    store.revoke(1, HASH_H)
    store.mark(_consent(1, HASH_H, owner))
    store.revoke_all(1)

    assert store.epoch(1, HASH_H) == 2
    assert JsonConsentStore(path).epoch(1, HASH_H) == 2
    assert JsonConsentStore(path).epoch(2, HASH_H) == 0


def test_consent_store_rejects_malformed_entries(temp_dir: Path):
    path = temp_dir / "consents.json"
    path.write_text(
        json.dumps(
            {"schema_id": "consent_store", "schema_version": 1, "consents": [{"token_id": "1"}]}
        )
    )

    with pytest.raises(ValueError):
        JsonConsentStore(path)
