"""Remote ``isValidSignature`` checks over Ethereum JSON-RPC."""

from __future__ import annotations

import itertools
import logging
from typing import Any

import requests

from nftsig.abi import INVALID_VALUE, decode_magic_value, encode_is_valid_signature_call
from nftsig.app.ports import SignatureValidatorPort
from nftsig.errors import RpcError
from nftsig.utils.circuit_breaker import CircuitBreaker, CircuitBreakerOpen
from nftsig.utils.validation import normalize_address

logger = logging.getLogger(__name__)

# JSON-RPC error code used by nodes for execution reverts.
EXECUTION_REVERTED = 3


class JsonRpcSignatureValidator(SignatureValidatorPort):
    """Ask a deployed NFT contract via ``eth_call``.

    A revert or empty result is reported as ``INVALID_VALUE``: a contract that
    does not implement the method is not endorsing anything.
    """

    def __init__(
        self,
        rpc_url: str,
        contract_address: str,
        *,
        timeout: float = 10.0,
        block: str = "latest",
        session: requests.Session | None = None,
        breaker: CircuitBreaker | None = None,
    ) -> None:
        self.rpc_url = rpc_url
        self.contract_address = normalize_address(contract_address)
        self.timeout = timeout
        self.block = block
        self._owns_session = session is None
        self.session = session or requests.Session()
        self.breaker = breaker or CircuitBreaker(failure_threshold=3, timeout_seconds=30.0)
        self._ids = itertools.count(1)

    def is_valid_signature(self, token_id: int, message_hash: bytes) -> bytes:
        calldata = encode_is_valid_signature_call(token_id, message_hash)
        call = {"to": self.contract_address, "data": "0x" + calldata.hex()}

        try:
            result = self._request("eth_call", [call, self.block])
        except RpcError as exc:
            if _is_revert(exc):
                logger.info("isValidSignature reverted for token %d: %s", token_id, exc)
                return INVALID_VALUE
            raise

        raw = _hex_to_bytes(result)
        if not raw:
            logger.info("Empty isValidSignature result for token %d", token_id)
            return INVALID_VALUE
        return decode_magic_value(raw)

    def close(self) -> None:
        """Close the HTTP session if this validator created it."""
        if self._owns_session:
            self.session.close()

    def __enter__(self) -> JsonRpcSignatureValidator:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _request(self, method: str, params: list[Any]) -> Any:
        payload = {"jsonrpc": "2.0", "id": next(self._ids), "method": method, "params": params}
        logger.debug("POST %s %s", self.rpc_url, method)

        def send() -> requests.Response:
            try:
                response = self.session.post(self.rpc_url, json=payload, timeout=self.timeout)
                response.raise_for_status()
            except requests.RequestException as exc:
                raise RpcError(f"{method} request to {self.rpc_url} failed: {exc}") from exc
            return response

        try:
            response = self.breaker.call(send)
        except CircuitBreakerOpen as exc:
            raise RpcError(str(exc)) from exc

        try:
            body = response.json()
        except ValueError as exc:
            raise RpcError(f"{method} returned non-JSON response") from exc

        error = body.get("error") if isinstance(body, dict) else None
        if isinstance(error, dict):
            raise RpcError(
                f"{method} failed: {error.get('message', error)}", code=error.get("code")
            )
        if error:
            raise RpcError(f"{method} failed: {error}")

        if not isinstance(body, dict) or "result" not in body:
            raise RpcError(f"{method} response has no result")
        return body["result"]


def _hex_to_bytes(value: Any) -> bytes:
    if not isinstance(value, str):
        raise RpcError(f"Expected hex string result, got {type(value).__name__}")
    text = value[2:] if value[:2].lower() == "0x" else value
    try:
        return bytes.fromhex(text)
    except ValueError as exc:
        raise RpcError(f"Result is not valid hex: {value!r}") from exc


def _is_revert(exc: RpcError) -> bool:
    if exc.code is None:
        return False
    if exc.code == EXECUTION_REVERTED:
        return True
    # Geth-style nodes report reverts as -32000 with a textual reason.
    return "revert" in str(exc).lower()
