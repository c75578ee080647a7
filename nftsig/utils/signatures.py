"""EIP-191 signature recovery for off-chain consent."""

from __future__ import annotations

from eth_account import Account
from eth_account.messages import encode_defunct

from nftsig.errors import InvalidSignatureError
from nftsig.utils.validation import normalize_address

SIGNATURE_LENGTH = 65


def recover_signer(digest: bytes, signature: bytes) -> str:
    """Recover the checksum address that personal-signed ``digest``.

    Raises:
        InvalidSignatureError: If the signature is malformed or unrecoverable
    """
    if len(signature) != SIGNATURE_LENGTH:
        raise InvalidSignatureError(
            f"Signature must be {SIGNATURE_LENGTH} bytes, got {len(signature)}"
        )

    try:
        recovered = Account.recover_message(encode_defunct(primitive=digest), signature=signature)
    except Exception as exc:  # noqa: BLE001 - eth-keys raises several unrelated types
        raise InvalidSignatureError(f"Cannot recover signer: {exc}") from exc
    return normalize_address(recovered)
