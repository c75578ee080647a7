"""Input validation for token identifiers and addresses."""

from __future__ import annotations

from eth_utils import is_address, to_checksum_address

UINT256_MAX = 2**256 - 1


def require_token_id(token_id: int) -> int:
    """Return ``token_id`` if it fits in a uint256, else raise ``ValueError``."""
    if isinstance(token_id, bool) or not isinstance(token_id, int):
        raise ValueError(f"Token id must be an integer, got {type(token_id).__name__}")
    if token_id < 0 or token_id > UINT256_MAX:
        raise ValueError(f"Token id out of uint256 range: {token_id}")
    return token_id


def parse_token_id(value: str | int) -> int:
    """Parse a decimal or ``0x`` hex token id."""
    if isinstance(value, int):
        return require_token_id(value)

    text = value.strip()
    try:
        parsed = int(text, 16) if text.lower().startswith("0x") else int(text, 10)
    except ValueError as exc:
        raise ValueError(f"Invalid token id: {value!r}") from exc
    return require_token_id(parsed)


def normalize_address(address: str) -> str:
    """Return the EIP-55 checksum form of ``address``.

    Raises:
        ValueError: If ``address`` is not a 20-byte hex address
    """
    if not isinstance(address, str) or not is_address(address):
        raise ValueError(f"Invalid address: {address!r}")
    return to_checksum_address(address)
