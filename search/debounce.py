"""
Debounce wrapper for search-as-you-type.

Each call restarts the quiet-period timer. Only the most recent call runs
the wrapped coroutine function and receives its result; superseded calls
resolve to ``None``.
"""

from __future__ import annotations

import asyncio
import functools
import logging
from collections.abc import Awaitable, Callable
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_DELAY = 0.3


class Debouncer:
    """Delay ``fn`` until calls stop arriving for ``delay`` seconds."""

    def __init__(
        self,
        fn: Callable[..., Awaitable[Any]],
        delay: float = DEFAULT_DEBOUNCE_DELAY,
    ) -> None:
        self._fn = fn
        self.delay = delay
        self._timer: asyncio.TimerHandle | None = None
        self._pending: asyncio.Future[bool] | None = None
        functools.update_wrapper(self, fn, updated=())

    @property
    def pending(self) -> bool:
        return self._pending is not None and not self._pending.done()

    def cancel(self) -> None:
        """Drop the pending call, if any; its caller receives ``None``."""
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        if self._pending is not None and not self._pending.done():
            self._pending.set_result(False)
        self._pending = None

    def _fire(self, waiter: asyncio.Future[bool]) -> None:
        if self._pending is waiter:
            self._timer = None
            self._pending = None
        if not waiter.done():
            waiter.set_result(True)

    async def __call__(self, *args: Any, **kwargs: Any) -> Any:
        loop = asyncio.get_running_loop()
        self.cancel()

        waiter: asyncio.Future[bool] = loop.create_future()
        self._pending = waiter
        self._timer = loop.call_later(self.delay, self._fire, waiter)

        try:
            fired = await waiter
        except asyncio.CancelledError:
            if self._pending is waiter:
                self.cancel()
            raise

        if not fired:
            logger.debug(
                "Debounced call to %s superseded",
                getattr(self, "__name__", self._fn),
            )
            return None
        return await self._fn(*args, **kwargs)


def debounce(delay: float = DEFAULT_DEBOUNCE_DELAY):
    """Decorator form of :class:`Debouncer` for module-level coroutine functions."""

    def decorator(fn: Callable[..., Awaitable[Any]]) -> Debouncer:
        return Debouncer(fn, delay)

    return decorator


def create_debounced_search(
    search_fn: Callable[..., Awaitable[Any]],
    delay: float = DEFAULT_DEBOUNCE_DELAY,
) -> Debouncer:
    return Debouncer(search_fn, delay)


__all__ = ["Debouncer", "create_debounced_search", "debounce"]
