import asyncio
from unittest.mock import AsyncMock

import aiohttp
import pytest

from core.exceptions import ExternalServiceException
from core.http.retry import retry_async
from core.http.transit import TransitClient
from tests.http_fakes import FakeResponse, FakeSession


@pytest.mark.asyncio
async def test_retry_async_retries_until_success() -> None:
    attempts = 0

    @retry_async(max_retries=2, retry_delay=0)
    async def flaky():
        nonlocal attempts
        attempts += 1
        if attempts < 3:
            raise asyncio.TimeoutError()
        return "ok"

    result = await flaky()
    assert result == "ok"
    assert attempts == 3


@pytest.mark.asyncio
async def test_retry_async_raises_after_exhaustion() -> None:
    attempts = 0

    @retry_async(max_retries=1, retry_delay=0)
    async def always_fail():
        nonlocal attempts
        attempts += 1
        raise asyncio.TimeoutError()

    with pytest.raises(asyncio.TimeoutError):
        await always_fail()

    assert attempts == 2


@pytest.mark.asyncio
async def test_retry_async_does_not_retry_http_status_errors() -> None:
    attempts = 0

    @retry_async(max_retries=3, retry_delay=0)
    async def rejected():
        nonlocal attempts
        attempts += 1
        raise ExternalServiceException("Transit journeys error: 503")

    with pytest.raises(ExternalServiceException):
        await rejected()

    assert attempts == 1


@pytest.mark.asyncio
async def test_transport_errors_are_retried_before_the_request_fails(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    session = FakeSession(
        get_responses=[
            aiohttp.ServerDisconnectedError(),
            FakeResponse(json_data=[{"id": "8011160", "name": "Berlin Hbf"}]),
        ],
    )
    monkeypatch.setattr(
        "core.http.transit.get_session",
        AsyncMock(return_value=session),
    )

    stops = await TransitClient().nearby_stops(52.52, 13.37, distance=500, results=2)

    assert stops == [{"id": "8011160", "name": "Berlin Hbf"}]
    assert len(session.requests) == 2
