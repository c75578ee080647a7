"""Tests for the JSON-RPC isValidSignature client."""

from typing import Any

import pytest
import requests

from nftsig.abi import (
    INVALID_VALUE,
    IS_VALID_SIGNATURE_SELECTOR,
    MAGIC_VALUE,
    decode_is_valid_signature_call,
    encode_magic_value,
)
from nftsig.app.adapters import JsonRpcSignatureValidator
from nftsig.errors import RpcError
from nftsig.utils.circuit_breaker import CircuitBreaker

CONTRACT = "0x5fbdb2315678afecb367f032d93f642f64180aa3"
HASH = b"\x11" * 32


class FakeResponse:
    def __init__(self, body: Any, status_code: int = 200) -> None:
        self._body = body
        self.status_code = status_code

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"HTTP {self.status_code}")

    def json(self) -> Any:
        return self._body


class FakeSession:
    def __init__(self, *responses: Any) -> None:
        self.responses = list(responses)
        self.requests: list[dict[str, Any]] = []
        self.closed = False

    def post(self, url: str, json: dict[str, Any], timeout: float) -> FakeResponse:
        self.requests.append({"url": url, "json": json, "timeout": timeout})
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def close(self) -> None:
        self.closed = True


def _validator(session: FakeSession, **kwargs: Any) -> JsonRpcSignatureValidator:
    return JsonRpcSignatureValidator(
        "http://node:8545", CONTRACT, session=session, timeout=3.0, **kwargs  # type: ignore[arg-type]
    )


def _result(value: bytes) -> FakeResponse:
    return FakeResponse({"jsonrpc": "2.0", "id": 1, "result": "0x" + value.hex()})


def test_eth_call_payload_and_magic_result():
    session = FakeSession(_result(encode_magic_value(MAGIC_VALUE)))

    assert _validator(session).is_valid_signature(9, HASH) == MAGIC_VALUE

    sent = session.requests[0]
    assert sent["url"] == "http://node:8545"
    assert sent["timeout"] == 3.0
    assert sent["json"]["method"] == "eth_call"
    call, block = sent["json"]["params"]
    assert block == "latest"
    assert call["to"] == "0x5FbDB2315678afecb367f032d93F642f64180aa3"
    calldata = bytes.fromhex(call["data"][2:])
    assert calldata[:4] == IS_VALID_SIGNATURE_SELECTOR
    assert decode_is_valid_signature_call(calldata) == (9, HASH)


def test_non_magic_result_passes_through():
    session = FakeSession(_result(encode_magic_value(b"\x00\x00\x00\x01")))
    assert _validator(session).is_valid_signature(1, HASH) == b"\x00\x00\x00\x01"


def test_empty_result_is_invalid():
    session = FakeSession(FakeResponse({"jsonrpc": "2.0", "id": 1, "result": "0x"}))
    assert _validator(session).is_valid_signature(1, HASH) == INVALID_VALUE


@pytest.mark.parametrize(
    "error",
    [
        {"code": 3, "message": "execution reverted"},
        {"code": -32000, "message": "execution reverted: not minted"},
    ],
)
def test_revert_is_invalid(error):
    session = FakeSession(FakeResponse({"jsonrpc": "2.0", "id": 1, "error": error}))
    assert _validator(session).is_valid_signature(1, HASH) == INVALID_VALUE


def test_other_rpc_errors_raise():
    session = FakeSession(
        FakeResponse({"jsonrpc": "2.0", "id": 1, "error": {"code": -32601, "message": "nope"}})
    )
    with pytest.raises(RpcError, match="nope"):
        _validator(session).is_valid_signature(1, HASH)


def test_transport_failures_open_circuit():
    session = FakeSession(
        requests.ConnectionError("refused"),
        requests.ConnectionError("refused"),
        _result(encode_magic_value(MAGIC_VALUE)),
    )
    validator = _validator(session, breaker=CircuitBreaker(failure_threshold=2))

    for _ in range(2):
        with pytest.raises(RpcError, match="failed"):
            validator.is_valid_signature(1, HASH)

    with pytest.raises(RpcError, match="OPEN"):
        validator.is_valid_signature(1, HASH)
    assert len(session.requests) == 2


def test_http_error_raises():
    session = FakeSession(FakeResponse({}, status_code=502))
    with pytest.raises(RpcError, match="HTTP 502"):
        _validator(session).is_valid_signature(1, HASH)


def test_close_leaves_caller_session_open():
    session = FakeSession()

    with _validator(session):
        pass

    assert not session.closed


def test_close_releases_own_session(monkeypatch):
    created: list[FakeSession] = []

    def make_session() -> FakeSession:
        created.append(FakeSession(_result(encode_magic_value(MAGIC_VALUE))))
        return created[-1]

    monkeypatch.setattr(requests, "Session", make_session)

    with JsonRpcSignatureValidator("http://node:8545", CONTRACT) as validator:
        assert validator.is_valid_signature(1, HASH) == MAGIC_VALUE

    assert created[0].closed
