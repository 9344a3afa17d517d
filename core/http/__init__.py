"""HTTP client utilities and session management."""

from core.http.nominatim import NominatimClient
from core.http.osrm import OsrmClient
from core.http.overpass import OverpassClient, build_station_query
from core.http.rate_limit import ProviderRateLimiter
from core.http.request import request_json
from core.http.retry import retry_async
from core.http.session import cleanup_session, get_session
from core.http.transit import TransitClient

__all__ = [
    "NominatimClient",
    "OsrmClient",
    "OverpassClient",
    "ProviderRateLimiter",
    "TransitClient",
    "build_station_query",
    "cleanup_session",
    "get_session",
    "request_json",
    "retry_async",
]
