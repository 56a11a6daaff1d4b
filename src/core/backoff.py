"""
Exponential backoff and async retry for outbound calls.

``ExponentialBackoff`` computes jittered delays; ``retry_async`` drives an
awaitable factory through a bounded number of attempts using it.
"""

import asyncio
import logging
import random
from typing import Any, Awaitable, Callable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ExponentialBackoff:
    """
    Exponential backoff with jitter.

    Computes delays as: min(base * multiplier^attempt, max_delay) + jitter.
    Call reset() after a successful operation to zero the attempt counter.
    """

    def __init__(
        self,
        base_delay: float = 1.0,
        max_delay: float = 30.0,
        multiplier: float = 2.0,
        jitter_range: float = 0.25,
    ):
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.multiplier = multiplier
        self.jitter_range = jitter_range
        self._attempt = 0

    @property
    def attempt(self) -> int:
        """Current attempt count."""
        return self._attempt

    def next_delay(self) -> float:
        """Return the next delay and advance the attempt counter."""
        delay = min(
            self.base_delay * (self.multiplier ** self._attempt),
            self.max_delay,
        )
        jitter = delay * random.uniform(-self.jitter_range, self.jitter_range)
        self._attempt += 1
        return max(0.0, delay + jitter)

    def reset(self) -> None:
        """Reset the attempt counter after a successful operation."""
        self._attempt = 0


async def retry_async(
    fn: Callable[..., Awaitable[T]],
    *args: Any,
    max_attempts: int = 3,
    backoff: ExponentialBackoff | None = None,
    retry_on: tuple[type[BaseException], ...] = (Exception,),
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    **kwargs: Any,
) -> T:
    """Call ``fn(*args, **kwargs)`` until it succeeds or attempts run out.

    Only exceptions matching ``retry_on`` are retried; the last one is
    re-raised once ``max_attempts`` is exhausted.
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be >= 1")

    backoff = backoff or ExponentialBackoff()
    for attempt in range(1, max_attempts + 1):
        try:
            return await fn(*args, **kwargs)
        except retry_on as e:
            if attempt == max_attempts:
                raise
            delay = backoff.next_delay()
            logger.warning(
                "Attempt %d/%d failed (%s); retrying in %.2fs",
                attempt, max_attempts, e, delay,
            )
            await sleep(delay)

    raise AssertionError("unreachable")
