"""
OSRM HTTP client utilities.

Pedestrian routing against an OSRM ``foot`` profile. Coordinates go in
and come out latitude-first; OSRM itself speaks ``lon,lat``.
"""

from __future__ import annotations

import logging
from typing import Any

from config import get_osrm_base_url
from core.exceptions import ExternalServiceException
from core.http.circuit_breaker import osrm_breaker, with_circuit_breaker
from core.http.request import request_json
from core.http.retry import retry_async
from core.http.session import get_session

logger = logging.getLogger(__name__)


class OsrmClient:
    def __init__(self) -> None:
        self._route_url = f"{get_osrm_base_url()}/route/v1/foot"

    @staticmethod
    def _lon_lat(point: tuple[float, float]) -> str:
        lat, lon = point
        return f"{float(lon)},{float(lat)}"

    @with_circuit_breaker(osrm_breaker)
    @retry_async()
    async def foot_route(
        self,
        origin: tuple[float, float],
        destination: tuple[float, float],
    ) -> dict[str, Any] | None:
        """Return the first OSRM route between two points, or None if none exists."""
        url = f"{self._route_url}/{self._lon_lat(origin)};{self._lon_lat(destination)}"
        session = await get_session()
        data = await request_json(
            "GET",
            url,
            session=session,
            params={"overview": "full", "geometries": "geojson"},
            service_name="OSRM route",
            # OSRM reports NoRoute and friends as 400 with a JSON body
            none_on=(400,),
        )
        if data is None:
            return None
        if not isinstance(data, dict):
            msg = "OSRM route error: unexpected response"
            raise ExternalServiceException(msg, {"url": url})
        routes = data.get("routes")
        if data.get("code") != "Ok" or not isinstance(routes, list) or not routes:
            logger.debug("OSRM returned no route (code=%s)", data.get("code"))
            return None
        return routes[0]
