"""Port interfaces for the nftsig application layer.

These protocol interfaces define contracts for adapters.
Domain logic depends on these ports, never on concrete implementations.
"""

__all__ = [
    "AuditRecord",
    "ConsentRecord",
    "ConsentStorePort",
    "LedgerPort",
    "OwnershipPort",
    "SignatureValidatorPort",
    "SignerPort",
    "TokenRecord",
]

from nftsig.app.ports.consent import ConsentRecord, ConsentStorePort
from nftsig.app.ports.ledger import AuditRecord, LedgerPort
from nftsig.app.ports.ownership import OwnershipPort, TokenRecord
from nftsig.app.ports.signer import SignerPort
from nftsig.app.ports.validator import SignatureValidatorPort
