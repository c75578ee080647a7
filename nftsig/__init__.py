"""nftsig - token-bound signature validation for non-fungible tokens.

Reference validator, JSON-RPC client and CLI for the
``isValidSignature(uint256,bytes32)`` convention.
"""

__version__ = "0.1.0"
__author__ = "nftsig Contributors"

from nftsig.config import Settings, get_settings

__all__ = ["Settings", "get_settings", "__version__"]
