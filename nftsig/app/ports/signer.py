"""Signer port interface for off-chain consent authorization."""

from typing import Protocol


class SignerPort(Protocol):
    """Port interface for EIP-191 personal-sign operations.

    Side effects: None (pure computation).
    """

    @property
    def address(self) -> str:
        """Checksum address of the signing key."""
        ...

    def sign(self, digest: bytes) -> bytes:
        """Sign a 32-byte digest.

        Args:
            digest: Digest to sign

        Returns:
            65-byte ``r || s || v`` signature
        """
        ...
