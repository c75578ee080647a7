"""Tests for the RPC circuit breaker."""

import pytest

from nftsig.utils.circuit_breaker import CircuitBreaker, CircuitBreakerOpen


class Clock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def _boom() -> None:
    raise OSError("down")


def test_opens_after_threshold_and_recovers():
    clock = Clock()
    breaker = CircuitBreaker(failure_threshold=2, timeout_seconds=10, clock=clock)

    for _ in range(2):
        with pytest.raises(OSError):
            breaker.call(_boom)
    assert breaker.state == "OPEN"

    with pytest.raises(CircuitBreakerOpen):
        breaker.call(lambda: "unreached")

    clock.now = 11
    assert breaker.call(lambda: "ok") == "ok"
    assert breaker.state == "CLOSED"
    assert breaker.current_failures == 0


def test_half_open_failure_reopens():
    clock = Clock()
    breaker = CircuitBreaker(failure_threshold=1, timeout_seconds=5, clock=clock)

    with pytest.raises(OSError):
        breaker.call(_boom)
    clock.now = 6
    with pytest.raises(OSError):
        breaker.call(_boom)

    assert breaker.state == "OPEN"
    with pytest.raises(CircuitBreakerOpen):
        breaker.call(lambda: None)
