"""eth-account backed signer for consent digests."""

from __future__ import annotations

from eth_account import Account
from eth_account.messages import encode_defunct

from nftsig.app.ports import SignerPort


class EthAccountSigner(SignerPort):
    """Sign consent digests with an Ethereum private key (EIP-191)."""

    def __init__(self, private_key: str | bytes) -> None:
        try:
            self._account = Account.from_key(private_key)
        except Exception as exc:  # noqa: BLE001 - eth-keys raises its own ValidationError
            raise ValueError("Invalid signer private key") from exc

    @property
    def address(self) -> str:
        return self._account.address

    def sign(self, digest: bytes) -> bytes:
        signed = self._account.sign_message(encode_defunct(primitive=digest))
        return bytes(signed.signature)
