"""
Per-provider circuit breakers.

After ``failure_threshold`` consecutive failed calls a provider is skipped
for ``recovery_timeout`` seconds; calls made meanwhile fail fast with
:class:`CircuitOpen`. The first call after the timeout is a probe: success
closes the circuit again, failure reopens it for another full timeout.
"""

from __future__ import annotations

import functools
import logging
import time
from collections.abc import Callable

from core.constants import (
    NOMINATIM_PROVIDER,
    OSRM_PROVIDER,
    OVERPASS_PROVIDER,
    TRANSIT_PROVIDER,
)
from core.exceptions import ExternalServiceError

logger = logging.getLogger(__name__)

CLOSED = "closed"
OPEN = "open"
HALF_OPEN = "half-open"


class CircuitOpen(ExternalServiceError):
    """A provider call was refused without touching the network."""

    def __init__(self, service: str, resets_in: float) -> None:
        super().__init__(
            f"Circuit breaker open for {service} (resets in {resets_in:.0f}s)",
            {"service": service, "resets_in": resets_in},
        )
        self.service = service
        self.resets_in = resets_in


class CircuitBreaker:
    """
    Failure counter guarding one provider.

    Parameters
    ----------
    service : str
        Provider name used in log lines and in :class:`CircuitOpen`.
    failure_threshold : int
        Consecutive failures that open the circuit (default 5).
    recovery_timeout : float
        Seconds the circuit stays open before a probe is allowed (default 60).
    clock : callable
        Monotonic time source, replaceable in tests.
    """

    def __init__(
        self,
        service: str,
        *,
        failure_threshold: int = 5,
        recovery_timeout: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.service = service
        self.failure_threshold = failure_threshold
        self.recovery_timeout = recovery_timeout
        self._clock = clock
        self.reset()

    def reset(self) -> None:
        self._failures = 0
        self._opened_at: float | None = None

    def _elapsed(self) -> float:
        if self._opened_at is None:
            return 0.0
        return self._clock() - self._opened_at

    @property
    def state(self) -> str:
        if self._opened_at is None:
            return CLOSED
        if self._elapsed() >= self.recovery_timeout:
            return HALF_OPEN
        return OPEN

    def _trip(self) -> None:
        self._opened_at = self._clock()

    def record_success(self) -> None:
        if self._opened_at is not None:
            logger.info("%s recovered, circuit closed", self.service)
        self.reset()

    def record_failure(self) -> None:
        self._failures += 1
        state = self.state
        if state == HALF_OPEN:
            self._trip()
            logger.warning("%s probe failed, circuit reopened", self.service)
        elif state == CLOSED and self._failures >= self.failure_threshold:
            self._trip()
            logger.warning(
                "%s failed %d times in a row, circuit opened for %.0fs",
                self.service,
                self._failures,
                self.recovery_timeout,
            )

    def check(self) -> None:
        """Raise :class:`CircuitOpen` while calls must not go out."""
        if self.state == OPEN:
            resets_in = max(0.0, self.recovery_timeout - self._elapsed())
            raise CircuitOpen(self.service, resets_in)


BREAKERS: dict[str, CircuitBreaker] = {
    provider: CircuitBreaker(provider)
    for provider in (
        NOMINATIM_PROVIDER,
        TRANSIT_PROVIDER,
        OVERPASS_PROVIDER,
        OSRM_PROVIDER,
    )
}

nominatim_breaker = BREAKERS[NOMINATIM_PROVIDER]
transit_breaker = BREAKERS[TRANSIT_PROVIDER]
overpass_breaker = BREAKERS[OVERPASS_PROVIDER]
osrm_breaker = BREAKERS[OSRM_PROVIDER]


def reset_all_breakers() -> None:
    for breaker in BREAKERS.values():
        breaker.reset()


def with_circuit_breaker(breaker: CircuitBreaker):
    """Guard an async provider call with ``breaker``."""

    def decorator(fn):
        @functools.wraps(fn)
        async def wrapper(*args, **kwargs):
            breaker.check()
            try:
                result = await fn(*args, **kwargs)
            except CircuitOpen:
                raise
            except Exception:
                breaker.record_failure()
                raise
            breaker.record_success()
            return result

        return wrapper

    return decorator
