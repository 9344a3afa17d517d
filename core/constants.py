"""Global constants for the core package.

This module contains shared constants used across the engine.
"""

from typing import Final

# HTTP Client Constants
HTTP_CONNECTION_LIMIT: Final[int] = 10
HTTP_TIMEOUT_CONNECT: Final[float] = 10.0
HTTP_TIMEOUT_SOCK_READ: Final[float] = 30.0
HTTP_TIMEOUT_TOTAL: Final[float] = 60.0

# Provider keys used by the rate limiter and circuit breakers
NOMINATIM_PROVIDER: Final[str] = "nominatim"
TRANSIT_PROVIDER: Final[str] = "transit"
OVERPASS_PROVIDER: Final[str] = "overpass"
OSRM_PROVIDER: Final[str] = "osrm"

# Geo
EARTH_RADIUS_M: Final[float] = 6371000.0
WALKING_SPEED_KMH: Final[float] = 3.5

# Search
MIN_QUERY_LENGTH: Final[int] = 2
DEFAULT_SEARCH_LIMIT: Final[int] = 10
DEFAULT_REVERSE_ZOOM: Final[int] = 18

# Station discovery
STATION_SEARCH_RADIUS_M: Final[int] = 5000
DEFAULT_MAX_STATIONS: Final[int] = 8
MIN_PRIMARY_STATIONS: Final[int] = 3
DUPLICATE_STATION_RADIUS_M: Final[float] = 100.0
MAX_STATION_IMPORTANCE: Final[int] = 100
OVERPASS_QUERY_TIMEOUT_S: Final[int] = 25

# Journeys
DEFAULT_MAX_CONNECTIONS: Final[int] = 5
DEFAULT_DEPARTURES_WINDOW_MIN: Final[int] = 60
