"""Pacing policies for calls to the analysis service."""

import asyncio
from typing import Protocol

from aiolimiter import AsyncLimiter

from .constants import DEFAULT_PACING_DELAY_SECONDS


class Pacer(Protocol):
    """Waits between two consecutive analysis requests."""

    async def wait(self) -> None: ...


class NoPacing:
    """Never waits."""

    async def wait(self) -> None:
        return None


class FixedDelayPacer:
    """Sleeps a fixed number of seconds.

    Attributes:
        delay: Seconds to sleep on every ``wait``.
    """

    def __init__(self, *, delay: float = DEFAULT_PACING_DELAY_SECONDS):
        if delay < 0:
            raise ValueError(f"Pacing delay must not be negative, got {delay}")
        self.delay = delay

    async def wait(self) -> None:
        if self.delay:
            await asyncio.sleep(self.delay)


class RateLimitPacer:
    """Caps the request rate with a leaky-bucket limiter.

    Attributes:
        rate_limiter: AsyncLimiter allowing ``max_rate`` requests per ``time_period``.
    """

    def __init__(self, *, max_rate: float, time_period: float = 1):
        self.rate_limiter = AsyncLimiter(max_rate=max_rate, time_period=time_period)

    async def wait(self) -> None:
        await self.rate_limiter.acquire()
