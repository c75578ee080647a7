"""Pytest configuration and fixtures."""

import shutil
import tempfile
from collections.abc import Generator
from pathlib import Path

import pytest

from nftsig.app import TokenRegistryService, TokenSignatureService
from nftsig.app.adapters import EthAccountSigner, InMemoryConsentStore, InMemoryTokenRegistry
from nftsig.audit.ledger import AuditLedger
from nftsig.config import Settings

# Well-known development keys (Hardhat/Anvil accounts #0 and #1).
OWNER_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
OTHER_KEY = "0x59c6995e998f97a5a0044966f0945389dc9e86dae88c7a8412f4603b6b78690d"


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    tmpdir = tempfile.mkdtemp()
    try:
        yield Path(tmpdir)
    finally:
        shutil.rmtree(tmpdir, ignore_errors=True)


@pytest.fixture
def owner_signer() -> EthAccountSigner:
    return EthAccountSigner(OWNER_KEY)


@pytest.fixture
def other_signer() -> EthAccountSigner:
    return EthAccountSigner(OTHER_KEY)


@pytest.fixture
def owner(owner_signer: EthAccountSigner) -> str:
    """Address A in the consent scenario."""
    return owner_signer.address


@pytest.fixture
def other(other_signer: EthAccountSigner) -> str:
    """Address B in the consent scenario."""
    return other_signer.address


@pytest.fixture
def ledger(temp_dir: Path) -> AuditLedger:
    return AuditLedger(temp_dir / "audit.jsonl", hmac_key=b"k" * 32)


@pytest.fixture
def registry() -> InMemoryTokenRegistry:
    return InMemoryTokenRegistry()


@pytest.fixture
def consents() -> InMemoryConsentStore:
    return InMemoryConsentStore()


@pytest.fixture
def signature_service(
    registry: InMemoryTokenRegistry, consents: InMemoryConsentStore, ledger: AuditLedger
) -> TokenSignatureService:
    return TokenSignatureService(registry, consents, ledger_port=ledger, namespace="test")


@pytest.fixture
def registry_service(
    registry: InMemoryTokenRegistry, consents: InMemoryConsentStore, ledger: AuditLedger
) -> TokenRegistryService:
    return TokenRegistryService(registry, consents, ledger_port=ledger)


@pytest.fixture
def override_settings(temp_dir: Path) -> Generator[Settings, None, None]:
    """Provide isolated nftsig settings scoped to tests."""

    import nftsig.config as config_module

    original_settings = getattr(config_module, "_settings", None)

    settings = config_module.Settings(
        data_dir=temp_dir / "appdata",
        config_dir=temp_dir / "appconfig",
        audit_enabled=True,
    )
    config_module._settings = settings

    try:
        yield settings
    finally:
        config_module._settings = original_settings
