"""
Transit HTTP client.

Wraps the HAFAS REST API (``v6.db.transport.rest``): nearby stops,
journeys, station search and departures. Requests share one leaky-bucket
budget so bursts from station discovery and journey planning stay under
the provider's per-minute quota.
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

from config import get_transit_base_url
from core.exceptions import ExternalServiceException
from core.http.circuit_breaker import transit_breaker, with_circuit_breaker
from core.http.rate_limit import transit_rate_limiter
from core.http.request import request_json
from core.http.retry import retry_async
from core.http.session import get_session

logger = logging.getLogger(__name__)


class TransitClient:
    def __init__(self) -> None:
        base_url = get_transit_base_url()
        self._nearby_url = f"{base_url}/stops/nearby"
        self._journeys_url = f"{base_url}/journeys"
        self._locations_url = f"{base_url}/locations"
        self._stops_url = f"{base_url}/stops"

    async def _get(self, url: str, params: dict[str, Any], service_name: str) -> Any:
        async with transit_rate_limiter:
            session = await get_session()
            return await request_json(
                "GET",
                url,
                session=session,
                params=params,
                service_name=service_name,
            )

    @with_circuit_breaker(transit_breaker)
    @retry_async()
    async def nearby_stops(
        self,
        lat: float,
        lon: float,
        *,
        distance: int,
        results: int,
    ) -> list[dict[str, Any]]:
        params = {
            "latitude": lat,
            "longitude": lon,
            "distance": distance,
            "results": results,
        }
        data = await self._get(self._nearby_url, params, "Transit nearby")
        if not isinstance(data, list):
            msg = "Transit nearby error: unexpected response"
            raise ExternalServiceException(msg, {"url": self._nearby_url})
        return data

    @with_circuit_breaker(transit_breaker)
    @retry_async()
    async def journeys(self, params: dict[str, Any]) -> list[dict[str, Any]]:
        """Plan journeys; ``params`` are passed through as query parameters."""
        data = await self._get(self._journeys_url, params, "Transit journeys")
        if not isinstance(data, dict):
            msg = "Transit journeys error: unexpected response"
            raise ExternalServiceException(msg, {"url": self._journeys_url})
        journeys = data.get("journeys") or []
        if not isinstance(journeys, list):
            msg = "Transit journeys error: journeys is not a list"
            raise ExternalServiceException(msg, {"url": self._journeys_url})
        return journeys

    @with_circuit_breaker(transit_breaker)
    @retry_async()
    async def locations(self, query: str, *, results: int = 5) -> list[dict[str, Any]]:
        params = {
            "query": query,
            "results": results,
            "stops": "true",
            "addresses": "false",
            "poi": "false",
        }
        data = await self._get(self._locations_url, params, "Transit locations")
        if not isinstance(data, list):
            msg = "Transit locations error: unexpected response"
            raise ExternalServiceException(msg, {"url": self._locations_url})
        return data

    @with_circuit_breaker(transit_breaker)
    @retry_async()
    async def departures(
        self,
        stop_id: str,
        *,
        duration: int = 60,
    ) -> list[dict[str, Any]]:
        url = f"{self._stops_url}/{quote(str(stop_id), safe='')}/departures"
        data = await self._get(url, {"duration": duration}, "Transit departures")
        # v6 wraps departures in an object; older versions return a bare list
        if isinstance(data, dict):
            data = data.get("departures") or []
        if not isinstance(data, list):
            msg = "Transit departures error: unexpected response"
            raise ExternalServiceException(msg, {"url": url})
        return data
