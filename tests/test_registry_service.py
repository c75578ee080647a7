"""Tests for minting and transfers."""

import pytest

from nftsig.app import TokenRegistryService, TokenSignatureService
from nftsig.app.adapters import InMemoryConsentStore, InMemoryTokenRegistry
from nftsig.errors import NotTokenOwnerError, TokenExistsError, UnknownTokenError

HASH_H = "0x" + "11" * 32


def test_mint_and_owner(registry_service: TokenRegistryService, owner: str):
    record = registry_service.mint(5, owner.lower())

    assert record.owner == owner
    assert registry_service.owner_of(5) == owner
    assert [t.token_id for t in registry_service.list_tokens()] == [5]


def test_mint_twice_fails(registry_service: TokenRegistryService, owner: str, other: str):
    registry_service.mint(5, owner)
    with pytest.raises(TokenExistsError):
        registry_service.mint(5, other)
    assert registry_service.owner_of(5) == owner


def test_owner_of_unknown_token(registry_service: TokenRegistryService):
    with pytest.raises(UnknownTokenError):
        registry_service.owner_of(404)


def test_only_owner_transfers(registry_service: TokenRegistryService, owner: str, other: str):
    registry_service.mint(1, owner)

    with pytest.raises(NotTokenOwnerError):
        registry_service.transfer(1, other, other)
    assert registry_service.owner_of(1) == owner

    registry_service.transfer(1, owner, other)
    assert registry_service.owner_of(1) == other


def test_transfer_unknown_token(registry_service: TokenRegistryService, owner: str, other: str):
    with pytest.raises(UnknownTokenError):
        registry_service.transfer(1, owner, other)


def test_revoke_on_transfer_policy(owner: str, other: str):
    registry = InMemoryTokenRegistry()
    consents = InMemoryConsentStore()
    registry_service = TokenRegistryService(registry, consents, revoke_on_transfer=True)
    signature_service = TokenSignatureService(registry, consents)

    registry_service.mint(1, owner)
    signature_service.mark_consent(1, HASH_H, owner)
    registry_service.transfer(1, owner, other)

    assert not signature_service.is_valid(1, HASH_H)


def test_revoke_on_transfer_invalidates_old_signatures(owner_signer, other: str):
    registry = InMemoryTokenRegistry()
    consents = InMemoryConsentStore()
    registry_service = TokenRegistryService(registry, consents, revoke_on_transfer=True)
    signature_service = TokenSignatureService(registry, consents)
    owner = owner_signer.address

    registry_service.mint(1, owner)
    signature = owner_signer.sign(signature_service.consent_payload(1, HASH_H))
    signature_service.mark_consent_signed(1, HASH_H, signature)

    registry_service.transfer(1, owner, other)
    registry_service.transfer(1, other, owner)

    with pytest.raises(NotTokenOwnerError):
        signature_service.mark_consent_signed(1, HASH_H, signature)
    assert not signature_service.is_valid(1, HASH_H)
