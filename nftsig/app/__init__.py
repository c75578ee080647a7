"""Application layer for nftsig.

Services orchestrate domain rules; persistence and network I/O are delegated
to adapters via port interfaces.
"""

__all__ = [
    "AuditService",
    "TokenRegistryService",
    "TokenSignatureService",
]

from nftsig.app.audit_service import AuditService
from nftsig.app.registry_service import TokenRegistryService
from nftsig.app.signature_service import TokenSignatureService
