"""Centralized configuration for environment variables and external APIs.

This module is the single source of truth for configuration used across the
engine. Import getters from here rather than calling os.getenv directly in
multiple places. Getters read the environment at call time so overrides in
``.env`` or tests take effect without a reload.
"""

from __future__ import annotations

import logging
import os
from typing import Final

from dotenv import load_dotenv

# Load environment variables from .env if present
load_dotenv()

logger = logging.getLogger(__name__)

# --- Search policy ---
# Germany, Austria, Switzerland, Liechtenstein
SEARCH_COUNTRIES: Final[tuple[str, ...]] = ("de", "at", "ch", "li")

# --- Nominatim (geocoding / POI search) ---
DEFAULT_NOMINATIM_BASE_URL: Final[str] = "https://nominatim.openstreetmap.org"
DEFAULT_NOMINATIM_USER_AGENT: Final[str] = "TravelPlannerApp/1.0"
DEFAULT_NOMINATIM_MIN_INTERVAL: Final[float] = 1.0

# --- Transit (HAFAS REST) ---
DEFAULT_TRANSIT_BASE_URL: Final[str] = "https://v6.db.transport.rest"

# --- Overpass (OSM tag queries) ---
DEFAULT_OVERPASS_URL: Final[str] = "https://overpass-api.de/api/interpreter"

# --- OSRM (pedestrian routing) ---
DEFAULT_OSRM_BASE_URL: Final[str] = "https://router.project-osrm.org"


def _env_url(name: str, default: str) -> str:
    value = os.getenv(name, "").strip()
    return (value or default).rstrip("/")


def get_nominatim_base_url() -> str:
    return _env_url("NOMINATIM_BASE_URL", DEFAULT_NOMINATIM_BASE_URL)


def get_nominatim_search_url() -> str:
    return f"{get_nominatim_base_url()}/search"


def get_nominatim_reverse_url() -> str:
    return f"{get_nominatim_base_url()}/reverse"


def get_nominatim_user_agent() -> str:
    """Return the identification header Nominatim requires on every call."""
    value = os.getenv("NOMINATIM_USER_AGENT", "").strip()
    return value or DEFAULT_NOMINATIM_USER_AGENT


def get_nominatim_min_interval() -> float:
    """Minimum seconds between two Nominatim requests (usage policy: 1/s)."""
    raw = os.getenv("NOMINATIM_MIN_INTERVAL", "").strip()
    if not raw:
        return DEFAULT_NOMINATIM_MIN_INTERVAL
    try:
        value = float(raw)
    except ValueError:
        logger.warning(
            "Invalid NOMINATIM_MIN_INTERVAL=%r; using %.1fs",
            raw,
            DEFAULT_NOMINATIM_MIN_INTERVAL,
        )
        return DEFAULT_NOMINATIM_MIN_INTERVAL
    if value < 0:
        return DEFAULT_NOMINATIM_MIN_INTERVAL
    return value


def get_transit_base_url() -> str:
    return _env_url("TRANSIT_BASE_URL", DEFAULT_TRANSIT_BASE_URL)


def get_overpass_url() -> str:
    return _env_url("OVERPASS_URL", DEFAULT_OVERPASS_URL)


def get_osrm_base_url() -> str:
    return _env_url("OSRM_BASE_URL", DEFAULT_OSRM_BASE_URL)


__all__ = [
    "DEFAULT_NOMINATIM_BASE_URL",
    "DEFAULT_NOMINATIM_MIN_INTERVAL",
    "DEFAULT_NOMINATIM_USER_AGENT",
    "DEFAULT_OSRM_BASE_URL",
    "DEFAULT_OVERPASS_URL",
    "DEFAULT_TRANSIT_BASE_URL",
    "SEARCH_COUNTRIES",
    "get_nominatim_base_url",
    "get_nominatim_min_interval",
    "get_nominatim_reverse_url",
    "get_nominatim_search_url",
    "get_nominatim_user_agent",
    "get_osrm_base_url",
    "get_overpass_url",
    "get_transit_base_url",
]
