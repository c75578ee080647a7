"""Adapter implementations for nftsig ports."""

from nftsig.app.adapters.consent_store import InMemoryConsentStore, JsonConsentStore
from nftsig.app.adapters.jsonrpc import JsonRpcSignatureValidator
from nftsig.app.adapters.signer import EthAccountSigner
from nftsig.app.adapters.token_registry import InMemoryTokenRegistry, JsonTokenRegistry

__all__ = [
    "EthAccountSigner",
    "InMemoryConsentStore",
    "InMemoryTokenRegistry",
    "JsonConsentStore",
    "JsonRpcSignatureValidator",
    "JsonTokenRegistry",
]
