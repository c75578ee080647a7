"""Signature validator port interface."""

from typing import Protocol


class SignatureValidatorPort(Protocol):
    """Anything that can answer ``isValidSignature(tokenId, hash)``.

    Implementations must be read-only and callable by anyone.
    """

    def is_valid_signature(self, token_id: int, message_hash: bytes) -> bytes:
        """Return the 4-byte response for the pair.

        Args:
            token_id: uint256 token identifier
            message_hash: 32-byte message hash

        Returns:
            ``MAGIC_VALUE`` when valid, any other 4 bytes otherwise
        """
        ...

    def close(self) -> None:
        """Release any transport resources held by the validator."""
        ...
