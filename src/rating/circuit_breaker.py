"""Circuit breaker for the content evaluator's LLM calls.

CLOSED -> OPEN after ``failure_threshold`` consecutive failures; OPEN rejects
calls with CircuitOpenError until ``recovery_timeout`` elapses, then allows a
single HALF_OPEN trial call whose outcome closes or re-opens the circuit.
"""

import enum
import logging
import time
from typing import Any, Awaitable, Callable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CircuitState(enum.Enum):
    """Circuit breaker states."""

    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


class CircuitOpenError(Exception):
    """Raised when calling through an open circuit breaker."""


class CircuitBreaker:
    """Wraps an async callable with circuit breaker protection.

    Args:
        failure_threshold: Consecutive failures before opening.
        recovery_timeout: Seconds before a recovery call is allowed.
        name: Name used in log lines.
        clock: Monotonic time source (injectable for tests).
    """

    def __init__(
        self,
        failure_threshold: int = 5,
        recovery_timeout: float = 60.0,
        name: str = "evaluator",
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._failure_threshold = failure_threshold
        self._recovery_timeout = recovery_timeout
        self._name = name
        self._clock = clock
        self._state = CircuitState.CLOSED
        self._consecutive_failures = 0
        self._opened_at = 0.0

    @property
    def state(self) -> CircuitState:
        return self._state

    @property
    def consecutive_failures(self) -> int:
        return self._consecutive_failures

    async def call(
        self,
        fn: Callable[..., Awaitable[T]],
        *args: Any,
        **kwargs: Any,
    ) -> T:
        """Run ``fn`` unless the circuit is open."""
        if self._state == CircuitState.OPEN:
            if self._clock() - self._opened_at < self._recovery_timeout:
                raise CircuitOpenError(f"Circuit breaker {self._name} is OPEN")
            self._state = CircuitState.HALF_OPEN
            logger.info("Circuit breaker %s: OPEN -> HALF_OPEN", self._name)

        try:
            result = await fn(*args, **kwargs)
        except Exception:
            self._on_failure()
            raise

        if self._state == CircuitState.HALF_OPEN:
            logger.info("Circuit breaker %s: HALF_OPEN -> CLOSED", self._name)
        self._state = CircuitState.CLOSED
        self._consecutive_failures = 0
        return result

    def _on_failure(self) -> None:
        self._consecutive_failures += 1
        if (
            self._state == CircuitState.HALF_OPEN
            or self._consecutive_failures >= self._failure_threshold
        ):
            if self._state != CircuitState.OPEN:
                logger.warning(
                    "Circuit breaker %s: %s -> OPEN after %d failures",
                    self._name, self._state.value, self._consecutive_failures,
                )
            self._state = CircuitState.OPEN
            self._opened_at = self._clock()
