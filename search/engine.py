"""
Search engine composition.

Wires the provider clients and services together around a single
``ProviderRateLimiter`` so every Nominatim caller in the process shares
one throttle.
"""

from __future__ import annotations

import logging

from config import get_nominatim_min_interval
from core.constants import NOMINATIM_PROVIDER
from core.http.nominatim import NominatimClient
from core.http.osrm import OsrmClient
from core.http.overpass import OverpassClient
from core.http.rate_limit import ProviderRateLimiter
from core.http.transit import TransitClient
from search.services import JourneyService, RouteService, SearchService, StationService

logger = logging.getLogger(__name__)


class SearchEngine:
    def __init__(
        self,
        *,
        rate_limiter: ProviderRateLimiter | None = None,
        nominatim: NominatimClient | None = None,
        transit: TransitClient | None = None,
        overpass: OverpassClient | None = None,
        osrm: OsrmClient | None = None,
    ) -> None:
        if rate_limiter is None:
            rate_limiter = ProviderRateLimiter(
                {NOMINATIM_PROVIDER: get_nominatim_min_interval()},
            )
        self.rate_limiter = rate_limiter
        transit = transit or TransitClient()

        self.search = SearchService(nominatim or NominatimClient(rate_limiter))
        self.stations = StationService(transit, overpass or OverpassClient())
        self.journeys = JourneyService(transit)
        self.routes = RouteService(osrm or OsrmClient(), self.journeys)


_engine: SearchEngine | None = None


def get_engine() -> SearchEngine:
    """Return the process-wide engine, creating it on first use."""
    global _engine
    if _engine is None:
        _engine = SearchEngine()
        logger.debug("Search engine initialized")
    return _engine


def reset_engine() -> None:
    global _engine
    _engine = None


__all__ = ["SearchEngine", "get_engine", "reset_engine"]
