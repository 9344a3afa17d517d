"""
Overpass HTTP client.

Runs Overpass QL queries against the public interpreter and builds the
transit-stop query used by station discovery.
"""

from __future__ import annotations

import logging
from typing import Any

from config import get_overpass_url
from core.constants import OVERPASS_QUERY_TIMEOUT_S
from core.exceptions import ExternalServiceException
from core.http.circuit_breaker import overpass_breaker, with_circuit_breaker
from core.http.rate_limit import overpass_rate_limiter
from core.http.request import request_json
from core.http.retry import retry_async
from core.http.session import get_session

logger = logging.getLogger(__name__)

# (element type, tag key, tag value) selectors for transit stops
STATION_SELECTORS: tuple[tuple[str, str, str], ...] = (
    ("node", "railway", "station"),
    ("node", "railway", "halt"),
    ("node", "public_transport", "station"),
    ("node", "highway", "bus_stop"),
    ("way", "railway", "station"),
    ("way", "public_transport", "station"),
)


def build_station_query(
    lat: float,
    lon: float,
    radius_m: int,
    *,
    timeout_s: int = OVERPASS_QUERY_TIMEOUT_S,
) -> str:
    """Overpass QL for stations, halts and bus stops around a point."""
    around = f"(around:{radius_m},{lat},{lon})"
    selectors = "\n".join(
        f'  {element}["{key}"="{value}"]{around};'
        for element, key, value in STATION_SELECTORS
    )
    return f"[out:json][timeout:{timeout_s}];\n(\n{selectors}\n);\nout center;"


class OverpassClient:
    def __init__(self) -> None:
        self._url = get_overpass_url()

    @with_circuit_breaker(overpass_breaker)
    @retry_async(max_retries=1, retry_delay=2.0)
    async def query(self, ql: str) -> list[dict[str, Any]]:
        """Execute an Overpass QL query and return its ``elements``."""
        async with overpass_rate_limiter:
            session = await get_session()
            data = await request_json(
                "POST",
                self._url,
                session=session,
                data={"data": ql},
                service_name="Overpass",
            )
        if not isinstance(data, dict):
            msg = "Overpass error: unexpected response"
            raise ExternalServiceException(msg, {"url": self._url})
        elements = data.get("elements") or []
        if not isinstance(elements, list):
            msg = "Overpass error: elements is not a list"
            raise ExternalServiceException(msg, {"url": self._url})
        return elements
