"""Circuit breaker guarding calls to a JSON-RPC node.

States:
- CLOSED: Normal operation, calls pass through
- OPEN: Too many failures, calls fail fast without reaching the node
- HALF_OPEN: Probing whether the node recovered

See: https://martinfowler.com/bliki/CircuitBreaker.html
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Literal, TypeVar

T = TypeVar("T")

logger = logging.getLogger(__name__)


class CircuitBreakerOpen(Exception):
    """Raised when circuit breaker is in OPEN state and rejects calls."""


@dataclass
class CircuitBreaker:
    """Fail fast after repeated transport errors.

    Example:
        >>> breaker = CircuitBreaker(failure_threshold=3, timeout_seconds=30)
        >>> result = breaker.call(lambda: session.post(url, json=payload))
    """

    failure_threshold: int = 5
    """Number of consecutive failures before opening circuit"""

    timeout_seconds: float = 60.0
    """Seconds to wait before attempting recovery (OPEN → HALF_OPEN)"""

    clock: Callable[[], float] = time.monotonic

    current_failures: int = field(default=0, init=False)
    state: Literal["CLOSED", "OPEN", "HALF_OPEN"] = field(default="CLOSED", init=False)
    last_failure_time: float | None = field(default=None, init=False)

    def call(self, fn: Callable[[], T]) -> T:
        """Execute ``fn`` unless the circuit is open.

        Raises:
            CircuitBreakerOpen: If circuit is OPEN and the timeout has not elapsed
            Exception: Any exception raised by fn() (counted as a failure)
        """
        if self.state == "OPEN":
            if self._should_attempt_reset():
                logger.info("Circuit half-open; probing RPC endpoint")
                self.state = "HALF_OPEN"
            else:
                raise CircuitBreakerOpen(
                    f"Circuit breaker is OPEN (failed {self.current_failures} times). "
                    f"Retry after {self.timeout_seconds}s timeout."
                )

        try:
            result = fn()
        except Exception:
            self._on_failure()
            raise

        self._on_success()
        return result

    def _on_success(self) -> None:
        self.state = "CLOSED"
        self.current_failures = 0
        self.last_failure_time = None

    def _on_failure(self) -> None:
        self.current_failures += 1
        self.last_failure_time = self.clock()

        if self.state == "HALF_OPEN" or self.current_failures >= self.failure_threshold:
            if self.state != "OPEN":
                logger.warning(
                    "Opening circuit after %d consecutive failures", self.current_failures
                )
            self.state = "OPEN"

    def _should_attempt_reset(self) -> bool:
        if self.last_failure_time is None:
            return True
        return self.clock() - self.last_failure_time >= self.timeout_seconds

    def reset(self) -> None:
        """Manually reset circuit breaker to CLOSED state."""
        self._on_success()
