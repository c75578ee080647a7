"""Tamper-evident audit trail."""

from nftsig.audit.ledger import AuditEntry, AuditLedger

__all__ = ["AuditEntry", "AuditLedger"]
