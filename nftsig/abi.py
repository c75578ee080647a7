"""Wire form of the ``isValidSignature(uint256,bytes32)`` convention.

An NFT contract answers ``isValidSignature(tokenId, hash)`` with a 4-byte
value. ``MAGIC_VALUE`` means the token endorses the hash; anything else is a
plain negative. ``INVALID_VALUE`` is what the reference validator returns.
"""

from __future__ import annotations

from eth_abi import decode, encode
from eth_abi.exceptions import DecodingError
from eth_utils import function_signature_to_4byte_selector

from nftsig.utils.hashing import parse_message_hash
from nftsig.utils.validation import require_token_id

IS_VALID_SIGNATURE_SIGNATURE = "isValidSignature(uint256,bytes32)"
MAGIC_VALUE = bytes.fromhex("1e6395e6")
INVALID_VALUE = bytes.fromhex("ffffffff")

SELECTOR_LENGTH = 4
WORD_LENGTH = 32


def function_selector(signature: str) -> bytes:
    """Return the first four bytes of keccak-256 over a canonical signature."""
    return function_signature_to_4byte_selector(signature)


IS_VALID_SIGNATURE_SELECTOR = function_selector(IS_VALID_SIGNATURE_SIGNATURE)


def encode_is_valid_signature_call(token_id: int, message_hash: bytes | str) -> bytes:
    """Build calldata for ``isValidSignature(tokenId, hash)``."""
    args = encode(
        ["uint256", "bytes32"],
        [require_token_id(token_id), parse_message_hash(message_hash)],
    )
    return IS_VALID_SIGNATURE_SELECTOR + args


def decode_is_valid_signature_call(calldata: bytes) -> tuple[int, bytes]:
    """Split calldata back into ``(token_id, message_hash)``.

    Raises:
        ValueError: If the selector does not match or the arguments are malformed
    """
    selector = bytes(calldata[:SELECTOR_LENGTH])
    if selector != IS_VALID_SIGNATURE_SELECTOR:
        raise ValueError(
            f"Unexpected selector 0x{selector.hex()}, "
            f"expected 0x{IS_VALID_SIGNATURE_SELECTOR.hex()}"
        )

    body = bytes(calldata[SELECTOR_LENGTH:])
    if len(body) != 2 * WORD_LENGTH:
        raise ValueError(f"Expected {2 * WORD_LENGTH} bytes of arguments, got {len(body)}")

    try:
        token_id, message_hash = decode(["uint256", "bytes32"], body)
    except DecodingError as exc:
        raise ValueError(f"Malformed isValidSignature calldata: {exc}") from exc
    return token_id, message_hash


def decode_magic_value(return_data: bytes) -> bytes:
    """Decode an ABI-encoded ``bytes4`` return value.

    Raises:
        ValueError: If the return data is shorter than one word or malformed
    """
    if len(return_data) < WORD_LENGTH:
        raise ValueError(
            f"Return data must be at least {WORD_LENGTH} bytes, got {len(return_data)}"
        )

    try:
        (value,) = decode(["bytes4"], bytes(return_data[:WORD_LENGTH]))
    except DecodingError as exc:
        raise ValueError(f"Malformed bytes4 return data: {exc}") from exc
    return value


def encode_magic_value(value: bytes) -> bytes:
    """ABI-encode a 4-byte response as a padded word."""
    if len(value) != SELECTOR_LENGTH:
        raise ValueError(f"Magic value must be {SELECTOR_LENGTH} bytes, got {len(value)}")
    return encode(["bytes4"], [value])


def is_magic_value(value: bytes) -> bool:
    """True only for the reserved success value."""
    return bytes(value) == MAGIC_VALUE
