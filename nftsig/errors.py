"""Domain exceptions raised by nftsig services and adapters."""


class NftSigError(Exception):
    """Base class for nftsig domain errors."""


class UnknownTokenError(NftSigError, LookupError):
    """Raised when a token identifier has never been minted."""

    def __init__(self, token_id: int) -> None:
        super().__init__(f"Token {token_id} does not exist")
        self.token_id = token_id


class TokenExistsError(NftSigError):
    """Raised when minting a token identifier that is already owned."""

    def __init__(self, token_id: int) -> None:
        super().__init__(f"Token {token_id} already exists")
        self.token_id = token_id


class NotTokenOwnerError(NftSigError, PermissionError):
    """Raised when a caller acts on a token it does not currently own."""

    def __init__(self, token_id: int, caller: str, owner: str) -> None:
        super().__init__(f"{caller} is not the owner of token {token_id} (owner is {owner})")
        self.token_id = token_id
        self.caller = caller
        self.owner = owner


class InvalidSignatureError(NftSigError, ValueError):
    """Raised when an off-chain consent signature cannot be recovered."""


class RpcError(NftSigError, RuntimeError):
    """Raised when a JSON-RPC endpoint reports an error or is unreachable."""

    def __init__(self, message: str, *, code: int | None = None) -> None:
        super().__init__(message)
        self.code = code


class OfflineModeError(NftSigError, RuntimeError):
    """Raised when a network feature is used while offline mode is active."""
