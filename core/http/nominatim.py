"""
Nominatim HTTP client utilities.

Centralizes forward and reverse geocoding against Nominatim. Every attempt
(including tenacity retries) first claims a slot from the injected
``ProviderRateLimiter`` so the one-request-per-second usage policy holds
across all callers of the process.
"""

from __future__ import annotations

import logging
from typing import Any

from config import (
    get_nominatim_min_interval,
    get_nominatim_reverse_url,
    get_nominatim_search_url,
    get_nominatim_user_agent,
)
from core.constants import DEFAULT_REVERSE_ZOOM, NOMINATIM_PROVIDER
from core.exceptions import ExternalServiceException
from core.http.circuit_breaker import nominatim_breaker, with_circuit_breaker
from core.http.rate_limit import ProviderRateLimiter
from core.http.request import request_json
from core.http.retry import retry_async
from core.http.session import get_session

logger = logging.getLogger(__name__)


class NominatimClient:
    provider_key = NOMINATIM_PROVIDER

    def __init__(self, rate_limiter: ProviderRateLimiter | None = None) -> None:
        self._search_url = get_nominatim_search_url()
        self._reverse_url = get_nominatim_reverse_url()
        self._user_agent = get_nominatim_user_agent()
        if rate_limiter is None:
            rate_limiter = ProviderRateLimiter(
                {NOMINATIM_PROVIDER: get_nominatim_min_interval()},
            )
        self._rate_limiter = rate_limiter

    @property
    def rate_limiter(self) -> ProviderRateLimiter:
        return self._rate_limiter

    def _headers(self) -> dict[str, str]:
        return {"User-Agent": self._user_agent}

    @staticmethod
    def _format_viewbox(viewbox: tuple[float, float, float, float]) -> str:
        """Viewbox as ``minLon,minLat,maxLon,maxLat``."""
        return ",".join(str(value) for value in viewbox)

    @with_circuit_breaker(nominatim_breaker)
    @retry_async(max_retries=1, retry_delay=2.0)
    async def search(
        self,
        query: str,
        *,
        limit: int = 10,
        country_codes: list[str] | tuple[str, ...] | None = None,
        featuretype: str | None = None,
        viewbox: tuple[float, float, float, float] | None = None,
        bounded: bool = False,
    ) -> list[dict[str, Any]]:
        """Run a free-text search and return the raw Nominatim hits."""
        params: dict[str, Any] = {
            "format": "json",
            "q": query,
            "addressdetails": 1,
            "limit": limit,
        }
        if country_codes:
            params["countrycodes"] = ",".join(country_codes)
        if featuretype:
            params["featuretype"] = featuretype
        if viewbox:
            params["viewbox"] = self._format_viewbox(viewbox)
            if bounded:
                params["bounded"] = 1

        await self._rate_limiter.await_slot(self.provider_key)
        session = await get_session()
        results = await request_json(
            "GET",
            self._search_url,
            session=session,
            params=params,
            headers=self._headers(),
            service_name="Nominatim search",
        )
        if not isinstance(results, list):
            msg = "Nominatim search error: unexpected response"
            raise ExternalServiceException(msg, {"url": self._search_url})
        return results

    @with_circuit_breaker(nominatim_breaker)
    @retry_async(max_retries=1, retry_delay=2.0)
    async def reverse(
        self,
        lat: float,
        lon: float,
        *,
        zoom: int = DEFAULT_REVERSE_ZOOM,
    ) -> dict[str, Any] | None:
        """Reverse geocode a coordinate; None when Nominatim finds nothing."""
        params = {
            "format": "json",
            "lat": lat,
            "lon": lon,
            "zoom": zoom,
            "addressdetails": 1,
        }
        await self._rate_limiter.await_slot(self.provider_key)
        session = await get_session()
        data = await request_json(
            "GET",
            self._reverse_url,
            session=session,
            params=params,
            headers=self._headers(),
            service_name="Nominatim reverse",
            none_on=(404,),
        )
        if data is None:
            return None
        if not isinstance(data, dict):
            msg = "Nominatim reverse error: unexpected response"
            raise ExternalServiceException(msg, {"url": self._reverse_url})
        if "error" in data:
            # Nominatim answers 200 with {"error": "Unable to geocode"}
            logger.debug("Nominatim reverse found nothing at %s,%s", lat, lon)
            return None
        return data
