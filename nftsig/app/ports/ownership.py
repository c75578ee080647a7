"""Ownership port interface for token registries."""

from typing import Protocol

from pydantic import BaseModel, Field


class TokenRecord(BaseModel):
    """Current ownership of a single token."""

    token_id: int = Field(..., ge=0, description="uint256 token identifier")
    owner: str = Field(..., description="EIP-55 checksum address of the current owner")
    minted_at: str = Field(..., description="ISO-8601 timestamp of minting")
    updated_at: str = Field(..., description="ISO-8601 timestamp of the last ownership change")


class OwnershipPort(Protocol):
    """Port interface for token ownership.

    Adapters must guarantee each minted token has exactly one owner.

    Side effects: ``mint`` and ``transfer`` persist state; ``owner_of`` and
    ``list_tokens`` are read-only.
    """

    def owner_of(self, token_id: int) -> str:
        """Return the current owner.

        Raises:
            UnknownTokenError: If the token was never minted
        """
        ...

    def mint(self, token_id: int, owner: str) -> TokenRecord:
        """Create a token owned by ``owner``.

        Raises:
            TokenExistsError: If the token already exists
        """
        ...

    def transfer(self, token_id: int, new_owner: str) -> TokenRecord:
        """Reassign ownership. Authorization is the caller's concern.

        Raises:
            UnknownTokenError: If the token was never minted
        """
        ...

    def list_tokens(self) -> list[TokenRecord]:
        """Return all tokens ordered by id."""
        ...
