"""Rate limiters that pace the orchestrator between jurisdictions.

Both limiters are awaited once before each jurisdiction starts.  The clock
and sleep callables are injectable so tests can drive time explicitly.
"""

from __future__ import annotations

import asyncio
import time
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    Clock = Callable[[], float]
    Sleep = Callable[[float], Awaitable[None]]


class BaseRateLimiter(ABC):
    """Abstract pacing gate."""

    @abstractmethod
    async def acquire(self) -> None:
        """Wait until the caller may start its next unit of work."""


class FixedIntervalRateLimiter(BaseRateLimiter):
    """Spaces successive acquisitions at least ``interval`` seconds apart.

    The first acquisition returns immediately.

    Args:
        interval: Minimum seconds between acquisitions (0 disables pacing).
        clock: Monotonic clock.
        sleep: Async sleep function.
    """

    def __init__(
        self,
        interval: float = 0.1,
        *,
        clock: Clock = time.monotonic,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        if interval < 0:
            msg = "interval must be >= 0"
            raise ValueError(msg)
        self.interval = interval
        self._clock = clock
        self._sleep = sleep
        self._last: float | None = None
        self._lock = asyncio.Lock()

    async def acquire(self) -> None:
        async with self._lock:
            if self._last is not None and self.interval > 0:
                wait = self._last + self.interval - self._clock()
                if wait > 0:
                    await self._sleep(wait)
            self._last = self._clock()


class TokenBucketRateLimiter(BaseRateLimiter):
    """Token bucket allowing bursts of ``capacity`` then ``rate`` acquisitions per second.

    The bucket starts full.

    Args:
        rate: Tokens added per second.
        capacity: Maximum tokens held.
        clock: Monotonic clock.
        sleep: Async sleep function.
    """

    def __init__(
        self,
        rate: float,
        capacity: int = 1,
        *,
        clock: Clock = time.monotonic,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        if rate <= 0:
            msg = "rate must be > 0"
            raise ValueError(msg)
        if capacity < 1:
            msg = "capacity must be >= 1"
            raise ValueError(msg)
        self.rate = rate
        self.capacity = capacity
        self._clock = clock
        self._sleep = sleep
        self._tokens = float(capacity)
        self._updated = clock()
        self._lock = asyncio.Lock()

    def _refill(self) -> None:
        now = self._clock()
        self._tokens = min(float(self.capacity), self._tokens + (now - self._updated) * self.rate)
        self._updated = now

    async def acquire(self) -> None:
        async with self._lock:
            self._refill()
            while self._tokens < 1:
                await self._sleep((1 - self._tokens) / self.rate)
                self._refill()
            self._tokens -= 1
