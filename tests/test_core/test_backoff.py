"""Tests for exponential backoff and async retry."""

from unittest.mock import AsyncMock

import pytest

from src.core.backoff import ExponentialBackoff, retry_async


class TestExponentialBackoff:
    """Delay calculation."""

    def test_delays_double_without_jitter(self):
        backoff = ExponentialBackoff(base_delay=1.0, max_delay=60.0, jitter_range=0.0)
        assert [backoff.next_delay() for _ in range(3)] == [1.0, 2.0, 4.0]
        assert backoff.attempt == 3

    def test_caps_at_max_delay(self):
        backoff = ExponentialBackoff(base_delay=10.0, max_delay=30.0, jitter_range=0.0)
        assert [backoff.next_delay() for _ in range(3)] == [10.0, 20.0, 30.0]

    def test_jitter_bounded_and_non_negative(self):
        backoff = ExponentialBackoff(base_delay=4.0, max_delay=4.0, jitter_range=0.25)
        for _ in range(50):
            assert 3.0 <= backoff.next_delay() <= 5.0

    def test_reset(self):
        backoff = ExponentialBackoff(base_delay=1.0, jitter_range=0.0)
        backoff.next_delay()
        backoff.next_delay()
        backoff.reset()
        assert backoff.attempt == 0
        assert backoff.next_delay() == 1.0


class TestRetryAsync:
    """Bounded retries around an awaitable factory."""

    async def test_returns_first_success(self):
        fn = AsyncMock(return_value="ok")
        sleep = AsyncMock()

        assert await retry_async(fn, "a", key="b", sleep=sleep) == "ok"
        fn.assert_awaited_once_with("a", key="b")
        sleep.assert_not_called()

    async def test_retries_until_success(self):
        fn = AsyncMock(side_effect=[ConnectionError("1"), ConnectionError("2"), "ok"])
        sleep = AsyncMock()
        backoff = ExponentialBackoff(base_delay=1.0, jitter_range=0.0)

        assert await retry_async(fn, max_attempts=3, backoff=backoff, sleep=sleep) == "ok"
        assert [c.args[0] for c in sleep.call_args_list] == [1.0, 2.0]

    async def test_reraises_last_error(self):
        fn = AsyncMock(side_effect=[ConnectionError("first"), ConnectionError("last")])

        with pytest.raises(ConnectionError, match="last"):
            await retry_async(fn, max_attempts=2, sleep=AsyncMock())

    async def test_non_retryable_raises_immediately(self):
        fn = AsyncMock(side_effect=KeyError("nope"))

        with pytest.raises(KeyError):
            await retry_async(fn, max_attempts=5, retry_on=(ConnectionError,), sleep=AsyncMock())
        fn.assert_awaited_once()

    async def test_invalid_attempts(self):
        with pytest.raises(ValueError):
            await retry_async(AsyncMock(), max_attempts=0)
