"""Tenacity-based retry policy for provider calls.

Only transport failures (dropped connections, DNS errors, timeouts) are
retried. A provider that answered with an error status raises
``ExternalServiceError``, which is never retried.
"""

from __future__ import annotations

import asyncio
import logging

from aiohttp import ClientError
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

logger = logging.getLogger(__name__)

# ClientConnectorError and ServerDisconnectedError are ClientError subclasses
TRANSPORT_ERRORS: tuple[type[BaseException], ...] = (
    ClientError,
    asyncio.TimeoutError,
)


def retry_async(
    max_retries: int = 2,
    retry_delay: float = 1.0,
    backoff_factor: float = 2.0,
    retry_exceptions: tuple[type[BaseException], ...] = TRANSPORT_ERRORS,
):
    """Build a retry decorator for an async provider call.

    ``max_retries`` counts the extra attempts after the first one, waiting
    ``retry_delay * backoff_factor ** n`` seconds between them. The last
    exception is re-raised once attempts run out.

        @retry_async(max_retries=1, retry_delay=2.0)
        async def search(...):
            ...
    """
    return retry(
        stop=stop_after_attempt(max_retries + 1),
        wait=wait_exponential(multiplier=retry_delay, exp_base=backoff_factor),
        retry=retry_if_exception_type(retry_exceptions),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
