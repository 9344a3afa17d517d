"""
Rate limiting utilities for external provider calls.

``ProviderRateLimiter`` enforces a minimum interval between granted slots
per provider key (Nominatim allows at most one request per second). The
check-and-record step runs under a per-key ``asyncio.Lock`` so concurrent
callers queue up instead of racing past the interval check.

Providers that publish a request budget rather than a strict spacing use
``aiolimiter`` leaky buckets.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import TYPE_CHECKING

from aiolimiter import AsyncLimiter

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Mapping

logger = logging.getLogger(__name__)

# db.transport.rest allows 100 requests per minute
transit_rate_limiter = AsyncLimiter(100, 60)

# The public Overpass instance has a small per-IP slot pool
overpass_rate_limiter = AsyncLimiter(2, 10)


class ProviderRateLimiter:
    """Single-flight throttle keyed by provider.

    Args:
        intervals: Minimum seconds between slot starts, per provider key.
            Keys without an entry are granted immediately (still serialized).
        clock: Monotonic clock returning seconds.
        sleep: Awaitable delay primitive.
    """

    def __init__(
        self,
        intervals: Mapping[str, float] | None = None,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._intervals: dict[str, float] = dict(intervals or {})
        self._clock = clock
        self._sleep = sleep
        self._locks: dict[str, asyncio.Lock] = {}
        self._last_slot: dict[str, float] = {}

    def interval_for(self, provider_key: str) -> float:
        return self._intervals.get(provider_key, 0.0)

    def set_interval(self, provider_key: str, interval: float) -> None:
        self._intervals[provider_key] = max(0.0, interval)

    def last_slot(self, provider_key: str) -> float | None:
        return self._last_slot.get(provider_key)

    async def await_slot(self, provider_key: str) -> None:
        """Block until the provider's minimum interval has elapsed, then claim a slot."""
        lock = self._locks.get(provider_key)
        if lock is None:
            lock = self._locks.setdefault(provider_key, asyncio.Lock())

        async with lock:
            interval = self.interval_for(provider_key)
            last = self._last_slot.get(provider_key)
            if last is not None and interval > 0:
                wait = interval - (self._clock() - last)
                if wait > 0:
                    logger.debug(
                        "Throttling %s request for %.3fs", provider_key, wait
                    )
                    await self._sleep(wait)
            self._last_slot[provider_key] = self._clock()

    def reset(self) -> None:
        self._last_slot.clear()
        self._locks.clear()


__all__ = [
    "ProviderRateLimiter",
    "overpass_rate_limiter",
    "transit_rate_limiter",
]
