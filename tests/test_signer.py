"""Tests for eth-account signing and recovery."""

import pytest

from nftsig.app.adapters import EthAccountSigner
from nftsig.errors import InvalidSignatureError
from nftsig.utils.signatures import recover_signer

DIGEST = b"\x42" * 32


def test_sign_and_recover(owner_signer: EthAccountSigner):
    signature = owner_signer.sign(DIGEST)

    assert len(signature) == 65
    assert recover_signer(DIGEST, signature) == owner_signer.address


def test_known_development_address(owner_signer: EthAccountSigner):
    assert owner_signer.address == "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"


def test_recover_with_wrong_digest(owner_signer: EthAccountSigner):
    signature = owner_signer.sign(DIGEST)
    assert recover_signer(b"\x43" * 32, signature) != owner_signer.address


def test_recover_rejects_bad_length():
    with pytest.raises(InvalidSignatureError, match="65 bytes"):
        recover_signer(DIGEST, b"\x01" * 64)


def test_invalid_private_key():
    with pytest.raises(ValueError):
        EthAccountSigner("0x1234")
