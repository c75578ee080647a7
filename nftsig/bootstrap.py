"""Application bootstrap wiring ports, adapters, and services."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from nftsig.app import AuditService, TokenRegistryService, TokenSignatureService
from nftsig.app.adapters import (
    EthAccountSigner,
    JsonConsentStore,
    JsonRpcSignatureValidator,
    JsonTokenRegistry,
)
from nftsig.app.ports import AuditRecord, LedgerPort, SignatureValidatorPort, SignerPort
from nftsig.audit.ledger import AuditLedger
from nftsig.config import Settings, get_settings
from nftsig.utils.circuit_breaker import CircuitBreaker
from nftsig.utils.offline import OfflineModeGate

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ApplicationContainer:
    """Aggregates wired services and adapters for the CLI layer."""

    settings: Settings
    registry_service: TokenRegistryService
    signature_service: TokenSignatureService
    audit_service: AuditService
    ledger_port: LedgerPort
    offline_gate: OfflineModeGate
    remote_validator_factory: Callable[[str | None, str | None], SignatureValidatorPort]

    def signer(self) -> SignerPort | None:
        """Signer built from the stored private key, if one was imported."""
        private_key = self.settings.get_signer_key()
        if private_key is None:
            return None
        return EthAccountSigner(private_key)


class NoOpLedger:
    """Ledger implementation that drops all writes."""

    def log(self, *args: Any, **kwargs: Any) -> None:
        return None

    def read_all(self) -> list[AuditRecord]:
        return []

    def verify(self) -> tuple[bool, str | None]:
        return (True, None)


def _create_ledger(settings: Settings) -> AuditLedger | None:
    if not settings.audit_enabled:
        return None

    return AuditLedger(settings.get_audit_path(), hmac_key=settings.get_audit_hmac_key())


def _remote_validator_factory(
    settings: Settings, gate: OfflineModeGate
) -> Callable[[str | None, str | None], SignatureValidatorPort]:
    def build(rpc_url: str | None, contract: str | None) -> SignatureValidatorPort:
        url = rpc_url or settings.rpc_url
        address = contract or settings.contract_address
        gate.require_rpc(url)

        if not url:
            raise ValueError("No RPC endpoint configured. Pass --rpc-url or set NFTSIG_RPC_URL.")
        if not address:
            raise ValueError(
                "No contract configured. Pass --contract or set NFTSIG_CONTRACT_ADDRESS."
            )

        return JsonRpcSignatureValidator(
            url,
            address,
            timeout=settings.rpc_timeout_seconds,
            block=settings.rpc_block,
            breaker=CircuitBreaker(failure_threshold=settings.rpc_failure_threshold),
        )

    return build


def bootstrap_application(settings: Settings | None = None) -> ApplicationContainer:
    """Instantiate adapters and services for CLI consumption."""

    active_settings = settings or get_settings()
    offline_gate = OfflineModeGate.from_settings(active_settings)

    registry = JsonTokenRegistry(active_settings.get_registry_path())
    consents = JsonConsentStore(active_settings.get_consent_path())

    ledger = _create_ledger(active_settings)
    ledger_for_services: LedgerPort = ledger or NoOpLedger()  # type: ignore[assignment]

    registry_service = TokenRegistryService(
        registry,
        consents,
        ledger_port=ledger_for_services,
        revoke_on_transfer=active_settings.revoke_consent_on_transfer,
    )
    signature_service = TokenSignatureService(
        registry,
        consents,
        ledger_port=ledger_for_services,
        namespace=active_settings.consent_namespace,
    )

    logger.debug("Bootstrapped nftsig with data dir %s", active_settings.get_data_dir())

    return ApplicationContainer(
        settings=active_settings,
        registry_service=registry_service,
        signature_service=signature_service,
        audit_service=AuditService(ledger=ledger),  # type: ignore[arg-type]
        ledger_port=ledger_for_services,
        offline_gate=offline_gate,
        remote_validator_factory=_remote_validator_factory(active_settings, offline_gate),
    )
