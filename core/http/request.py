"""
JSON request helper shared by the provider clients.

Every provider speaks JSON over GET (or form-encoded POST for Overpass), so
status handling lives here once: 429 becomes ``RateLimitException``, any
other unexpected status or an unparseable body becomes
``ExternalServiceException``. Statuses listed in ``none_on`` mean
"no result" and yield ``None``.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from core.exceptions import ExternalServiceException, RateLimitException

if TYPE_CHECKING:
    from collections.abc import Iterable

logger = logging.getLogger(__name__)

DEFAULT_RETRY_AFTER = 5


def _retry_after(headers: Any) -> int:
    try:
        return int(headers.get("Retry-After", DEFAULT_RETRY_AFTER))
    except (TypeError, ValueError):
        return DEFAULT_RETRY_AFTER


def _statuses(value: int | Iterable[int] | None) -> frozenset[int]:
    if value is None:
        return frozenset()
    if isinstance(value, int):
        return frozenset((value,))
    return frozenset(value)


async def _check_status(
    response: Any,
    url: str,
    service_name: str,
    expected: frozenset[int],
) -> None:
    source = str(getattr(response, "url", url))
    if response.status == 429:
        raise RateLimitException(
            f"{service_name} error: 429",
            {
                "status": 429,
                "retry_after": _retry_after(response.headers),
                "url": source,
            },
        )
    if response.status not in expected:
        raise ExternalServiceException(
            f"{service_name} error: {response.status}",
            {"status": response.status, "body": await response.text(), "url": source},
        )


async def request_json(
    method: str,
    url: str,
    *,
    session: Any,
    params: dict[str, Any] | None = None,
    data: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
    expected_status: int | Iterable[int] = 200,
    none_on: Iterable[int] | None = None,
    service_name: str = "Service",
) -> Any | None:
    """Issue a GET or POST and return the decoded JSON body."""
    verb = method.upper()
    send = {"GET": session.get, "POST": session.post}.get(verb)
    if send is None:
        msg = f"{service_name} request error: unsupported method {verb}"
        raise ExternalServiceException(msg, {"url": url})

    kwargs: dict[str, Any] = {"params": params, "headers": headers}
    if data is not None:
        kwargs["data"] = data

    async with send(url, **kwargs) as response:
        if response.status in _statuses(none_on):
            logger.debug("%s returned %s for %s", service_name, response.status, url)
            return None
        await _check_status(response, url, service_name, _statuses(expected_status))
        try:
            return await response.json(content_type=None)
        except ValueError as exc:
            msg = f"{service_name} error: invalid JSON"
            raise ExternalServiceException(msg, {"url": url}) from exc
