"""Ledger port interface for audit trail operations."""

from collections.abc import Sequence
from typing import Any, Protocol

from pydantic import BaseModel, Field


class AuditRecord(BaseModel):
    """Ownership or consent change as recorded in the audit ledger.

    Ledger adapters may return richer subclasses carrying chain metadata.
    """

    timestamp: str = Field(..., description="ISO-8601 timestamp")
    operation: str = Field(..., description="Operation name recorded in the ledger")
    token_id: int | None = Field(default=None, ge=0, description="Token the operation touched")
    message_hash: str | None = Field(default=None, description="Message hash, if any")
    actor: str | None = Field(default=None, description="Address that performed the operation")
    args: dict[str, Any] = Field(default_factory=dict, description="Additional parameters")


class LedgerPort(Protocol):
    """Port interface for audit ledger operations.

    Adapters implementing this port must provide:
    - Append-only audit logging
    - Hash chain verification

    Side effects: Writes to audit ledger (offline).
    """

    def log(
        self,
        operation: str,
        *,
        token_id: int | None = None,
        message_hash: str | None = None,
        actor: str | None = None,
        args: dict[str, Any] | None = None,
    ) -> Any:
        """Log an operation to the audit ledger."""
        ...

    def verify(self) -> tuple[bool, str | None]:
        """Verify audit ledger integrity.

        Returns:
            Tuple of (is_valid, error_message)
        """
        ...

    def read_all(self) -> Sequence[AuditRecord]:
        """Return all entries in chronological order."""
        ...
