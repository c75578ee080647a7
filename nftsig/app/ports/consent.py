"""Consent store port interface."""

from typing import Literal, Protocol

from pydantic import BaseModel, Field


class ConsentRecord(BaseModel):
    """A token's endorsement of one message hash."""

    token_id: int = Field(..., ge=0, description="uint256 token identifier")
    message_hash: str = Field(..., description="0x-prefixed 32-byte hash")
    marked_by: str = Field(..., description="Owner address at the time consent was marked")
    marked_at: str = Field(..., description="ISO-8601 timestamp")
    method: Literal["direct", "signed"] = Field(
        default="direct",
        description="How the owner authorized the consent",
    )


class ConsentStorePort(Protocol):
    """Port interface for consent flags keyed by (token id, message hash).

    Side effects: ``mark`` and ``revoke*`` persist state. ``has_consent``,
    ``get`` and ``list_for_token`` must never write.
    """

    def mark(self, record: ConsentRecord) -> ConsentRecord:
        """Store ``record`` unless the pair is already marked.

        Returns:
            The stored record (the existing one if already marked)
        """
        ...

    def get(self, token_id: int, message_hash: bytes | str) -> ConsentRecord | None:
        ...

    def has_consent(self, token_id: int, message_hash: bytes | str) -> bool:
        ...

    def revoke(self, token_id: int, message_hash: bytes | str) -> bool:
        """Remove one consent. Returns True if something was removed.

        A removal advances the pair's :meth:`epoch`.
        """
        ...

    def revoke_all(self, token_id: int) -> int:
        """Remove every consent for ``token_id``. Returns the count removed."""
        ...

    def epoch(self, token_id: int, message_hash: bytes | str) -> int:
        """Number of times consent for the pair has been revoked."""
        ...

    def list_for_token(self, token_id: int) -> list[ConsentRecord]:
        ...
