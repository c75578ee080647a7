"""Offline-by-default guard in front of JSON-RPC access."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from nftsig.errors import OfflineModeError

if TYPE_CHECKING:  # pragma: no cover
    from nftsig.config import Settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class OfflineModeGate:
    """Refuse to contact a node unless online mode is enabled.

    Local registry queries never need the network; only ``remote verify``
    passes through this gate.
    """

    online_enabled: bool

    @classmethod
    def from_settings(cls, settings: "Settings") -> "OfflineModeGate":
        """Build the gate from ``--online`` / ``NFTSIG_ONLINE``."""

        return cls(online_enabled=settings.online)

    def require_rpc(self, rpc_url: str | None) -> None:
        """Raise :class:`OfflineModeError` unless ``rpc_url`` may be contacted."""

        target = rpc_url or "a JSON-RPC node"
        if self.online_enabled:
            logger.debug("Online mode enabled; contacting %s", target)
            return

        raise OfflineModeError(
            f"Contacting {target} requires online mode. "
            "Enable with `--online` or set NFTSIG_ONLINE=1."
        )
