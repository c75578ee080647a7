"""CLI integration smoke tests."""

from __future__ import annotations

import json

from typer.testing import CliRunner

from nftsig.cli import app

OWNER_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
HASH_H = "0x" + "11" * 32
HASH_H_PRIME = "0x" + "22" * 32

runner = CliRunner()


def _invoke(*args: str):
    return runner.invoke(app, list(args))


def test_version():
    result = _invoke("--version")
    assert result.exit_code == 0
    assert "nftsig version" in result.output


def test_consent_scenario_via_cli(override_settings, owner: str, other: str) -> None:
    """`mint`, `consent mark`, `verify` and `transfer` follow the convention."""

    assert _invoke("token", "mint", "1", owner).exit_code == 0

    result = _invoke("consent", "mark", "1", HASH_H, "--caller", owner)
    assert result.exit_code == 0, result.output

    valid = _invoke("verify", "1", HASH_H)
    assert valid.exit_code == 0
    assert "0x1e6395e6 valid" in valid.output

    invalid = _invoke("verify", "1", HASH_H_PRIME)
    assert invalid.exit_code == 1
    assert "0xffffffff invalid" in invalid.output

    transfer = _invoke("token", "transfer", "1", "--from", owner, "--to", other)
    assert transfer.exit_code == 0, transfer.output
    assert _invoke("token", "owner", "1").output.strip() == other
    assert _invoke("verify", "1", HASH_H).exit_code == 0


def test_non_owner_mark_rejected(override_settings, owner: str, other: str) -> None:
    _invoke("token", "mint", "1", owner)

    result = _invoke("consent", "mark", "1", HASH_H, "--caller", other)

    assert result.exit_code == 1
    assert "is not the owner" in result.output


def test_verify_json(override_settings, owner: str) -> None:
    _invoke("token", "mint", "0x10", owner)
    _invoke("consent", "mark", "16", HASH_H, "--caller", owner)

    result = _invoke("verify", "16", HASH_H, "--json")

    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["schema_id"] == "signature_check"
    assert payload["result"] == "0x1e6395e6"
    assert payload["valid"] is True
    assert payload["token_id"] == "16"


def test_bad_hash_is_usage_error(override_settings) -> None:
    result = _invoke("verify", "1", "0x1234")
    assert result.exit_code == 2


def test_signed_consent_with_stored_key(override_settings, owner: str) -> None:
    assert _invoke("key", "import", "--private-key", OWNER_KEY).exit_code == 0
    assert _invoke("key", "address").output.strip() == owner

    _invoke("token", "mint", "3", owner)
    result = _invoke("consent", "sign", "3", HASH_H)
    assert result.exit_code == 0, result.output
    assert f"signed by {owner}" in result.output

    assert _invoke("verify", "3", HASH_H).exit_code == 0


def test_consent_submit_and_revoke(override_settings, owner: str, owner_signer) -> None:
    _invoke("token", "mint", "4", owner)
    _invoke("key", "import", "--private-key", OWNER_KEY)

    printed = _invoke("consent", "sign", "4", HASH_H, "--print-only")
    assert printed.exit_code == 0
    assert _invoke("verify", "4", HASH_H).exit_code == 1

    submitted = _invoke("consent", "submit", "4", HASH_H, printed.output.strip())
    assert submitted.exit_code == 0, submitted.output
    assert _invoke("verify", "4", HASH_H).exit_code == 0

    listed = _invoke("consent", "list", "4", "--json")
    assert json.loads(listed.stdout)["consents"][0]["method"] == "signed"

    assert _invoke("consent", "revoke", "4", HASH_H, "--caller", owner).exit_code == 0
    assert _invoke("verify", "4", HASH_H).exit_code == 1


def test_abi_encode_decode(override_settings) -> None:
    encoded = _invoke("abi", "encode", "5", HASH_H)
    assert encoded.exit_code == 0

    decoded = _invoke("abi", "decode", encoded.output.strip())
    assert decoded.exit_code == 0
    assert "tokenId=5" in decoded.output
    assert f"hash={HASH_H}" in decoded.output


def test_hash_text(override_settings) -> None:
    result = _invoke("hash", "--text", "")
    assert result.exit_code == 0
    assert (
        result.output.strip()
        == "0xc5d2460186f7233c927e7db2dcc703c0e500b653ca82273b7bfad8045d85a470"
    )


def test_remote_verify_requires_online(override_settings, monkeypatch) -> None:
    monkeypatch.delenv("NFTSIG_ONLINE", raising=False)

    result = _invoke(
        "remote",
        "verify",
        "1",
        HASH_H,
        "--rpc-url",
        "http://node:8545",
        "--contract",
        "0x5FbDB2315678afecb367f032d93F642f64180aa3",
    )

    assert result.exit_code == 2
    assert "requires online mode" in result.output


def test_audit_show_and_verify(override_settings, owner: str) -> None:
    _invoke("token", "mint", "1", owner)
    _invoke("consent", "mark", "1", HASH_H, "--caller", owner)

    shown = _invoke("audit", "show", "--json")
    assert shown.exit_code == 0
    operations = [entry["operation"] for entry in json.loads(shown.stdout)["entries"]]
    assert operations == ["token_mint", "consent_mark"]

    verified = _invoke("audit", "verify")
    assert verified.exit_code == 0
    assert "Audit ledger is valid" in verified.output


def test_corrupt_state_file_reports_error(override_settings) -> None:
    data_dir = override_settings.get_data_dir()
    (data_dir / "consents.json").write_text(json.dumps({"schema_id": "other", "schema_version": 1}))

    result = _invoke("verify", "1", HASH_H)

    assert result.exit_code == 1
    assert not isinstance(result.exception, ValueError)
    assert "Expected schema consent_store@1" in result.output


def test_unreadable_registry_reports_error(override_settings) -> None:
    (override_settings.get_data_dir() / "tokens.json").write_text("{not json")

    result = _invoke("token", "list")

    assert result.exit_code == 1
    assert "Invalid JSON" in result.output


def test_token_history_and_filtered_audit(override_settings, owner: str, other: str) -> None:
    _invoke("token", "mint", "1", owner)
    _invoke("token", "mint", "2", owner)
    _invoke("consent", "mark", "1", HASH_H, "--caller", owner)
    _invoke("token", "transfer", "1", "--from", owner, "--to", other)

    history = _invoke("token", "history", "1")
    assert history.exit_code == 0
    assert history.output.splitlines() == [f"1. {owner}", f"2. {other}"]

    shown = _invoke("audit", "show", "--json", "--token", "1", "--hash", HASH_H)
    assert shown.exit_code == 0
    assert [e["operation"] for e in json.loads(shown.stdout)["entries"]] == ["consent_mark"]

    assert _invoke("audit", "show", "--hash", HASH_H).exit_code == 2


def test_invalid_log_level_reports_error(monkeypatch) -> None:
    import nftsig.config as config_module

    monkeypatch.setattr(config_module, "_settings", None)
    monkeypatch.setenv("NFTSIG_LOG_LEVEL", "LOUD")

    result = _invoke("abi", "selector")

    assert result.exit_code == 1
    assert "log_level" in result.output
