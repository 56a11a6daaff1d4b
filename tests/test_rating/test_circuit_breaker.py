"""Tests for the evaluator circuit breaker."""

import pytest

from src.rating.circuit_breaker import CircuitBreaker, CircuitOpenError, CircuitState


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


async def _success() -> str:
    return "ok"


async def _failure() -> str:
    raise RuntimeError("boom")


async def _trip(breaker: CircuitBreaker, times: int) -> None:
    for _ in range(times):
        with pytest.raises(RuntimeError):
            await breaker.call(_failure)


class TestClosedState:
    """Circuit in CLOSED state passes calls through."""

    async def test_passthrough_success(self) -> None:
        breaker = CircuitBreaker(failure_threshold=3)
        assert await breaker.call(_success) == "ok"
        assert breaker.state == CircuitState.CLOSED
        assert breaker.consecutive_failures == 0

    async def test_passes_arguments(self) -> None:
        async def add(a: int, b: int = 0) -> int:
            return a + b

        breaker = CircuitBreaker()
        assert await breaker.call(add, 2, b=3) == 5

    async def test_single_failure_stays_closed(self) -> None:
        breaker = CircuitBreaker(failure_threshold=3)
        await _trip(breaker, 1)
        assert breaker.state == CircuitState.CLOSED
        assert breaker.consecutive_failures == 1

    async def test_success_resets_failure_count(self) -> None:
        breaker = CircuitBreaker(failure_threshold=3)
        await _trip(breaker, 2)
        await breaker.call(_success)
        assert breaker.consecutive_failures == 0
        assert breaker.state == CircuitState.CLOSED


class TestOpenState:
    """Circuit opens after threshold failures and rejects calls."""

    async def test_opens_after_threshold(self) -> None:
        breaker = CircuitBreaker(failure_threshold=3)
        await _trip(breaker, 3)
        assert breaker.state == CircuitState.OPEN

    async def test_rejects_without_calling(self) -> None:
        clock = FakeClock()
        breaker = CircuitBreaker(failure_threshold=2, recovery_timeout=60.0, clock=clock)
        await _trip(breaker, 2)

        called = False

        async def trial() -> None:
            nonlocal called
            called = True

        clock.now += 59.0
        with pytest.raises(CircuitOpenError, match="OPEN"):
            await breaker.call(trial)
        assert called is False


class TestHalfOpenRecovery:
    """After the recovery timeout a single trial call decides the state."""

    async def test_trial_success_closes(self) -> None:
        clock = FakeClock()
        breaker = CircuitBreaker(failure_threshold=2, recovery_timeout=60.0, clock=clock)
        await _trip(breaker, 2)

        clock.now += 60.0
        assert await breaker.call(_success) == "ok"
        assert breaker.state == CircuitState.CLOSED
        assert breaker.consecutive_failures == 0

    async def test_trial_failure_reopens(self) -> None:
        clock = FakeClock()
        breaker = CircuitBreaker(failure_threshold=2, recovery_timeout=60.0, clock=clock)
        await _trip(breaker, 2)

        clock.now += 61.0
        await _trip(breaker, 1)
        assert breaker.state == CircuitState.OPEN

        # Timeout restarts from the failed trial call
        clock.now += 30.0
        with pytest.raises(CircuitOpenError):
            await breaker.call(_success)
