"""
Spatial utilities.

Pure distance, bearing and walking-time helpers. Coordinates are handled
latitude-first throughout the engine; provider payloads that arrive
longitude-first are reordered at the adapter boundary.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, Any

from core.constants import EARTH_RADIUS_M, WALKING_SPEED_KMH

if TYPE_CHECKING:
    from collections.abc import Sequence

LatLon = tuple[float, float]


class GeometryService:
    """Authoritative geometry operations for the engine."""

    EARTH_RADIUS_M = EARTH_RADIUS_M

    @staticmethod
    def coerce_lat_lon(lat: Any, lon: Any) -> LatLon | None:
        """Return a validated ``(lat, lon)`` pair or None.

        Accepts numbers and numeric strings (Nominatim sends strings).
        Booleans, NaN and out-of-range values are rejected.
        """
        if isinstance(lat, bool) or isinstance(lon, bool):
            return None
        try:
            lat_f = float(lat)
            lon_f = float(lon)
        except (TypeError, ValueError):
            return None
        if math.isnan(lat_f) or math.isnan(lon_f):
            return None
        if not (-90 <= lat_f <= 90 and -180 <= lon_f <= 180):
            return None
        return lat_f, lon_f

    @staticmethod
    def validate_coordinate_pair(
        coord: Sequence[Any],
    ) -> tuple[bool, LatLon | None]:
        """Validate a ``[lat, lon]`` coordinate pair."""
        if not isinstance(coord, (list, tuple)) or len(coord) < 2:
            return False, None
        pair = GeometryService.coerce_lat_lon(coord[0], coord[1])
        return pair is not None, pair

    @staticmethod
    def haversine_distance(
        lat1: float,
        lon1: float,
        lat2: float,
        lon2: float,
        unit: str = "meters",
    ) -> float:
        """Calculate the great-circle distance using the Haversine formula."""
        phi1 = math.radians(lat1)
        phi2 = math.radians(lat2)
        dphi = math.radians(lat2 - lat1)
        dlmb = math.radians(lon2 - lon1)
        a = (
            math.sin(dphi / 2) ** 2
            + math.cos(phi1) * math.cos(phi2) * math.sin(dlmb / 2) ** 2
        )
        distance_m = (
            2 * GeometryService.EARTH_RADIUS_M * math.asin(min(1.0, math.sqrt(a)))
        )
        if unit == "meters":
            return distance_m
        if unit == "km":
            return distance_m / 1000.0
        msg = "Invalid unit. Use 'meters' or 'km'."
        raise ValueError(msg)

    @staticmethod
    def distance_meters(a: LatLon, b: LatLon) -> float:
        return GeometryService.haversine_distance(a[0], a[1], b[0], b[1])

    @staticmethod
    def distance_km(a: LatLon, b: LatLon) -> float:
        return GeometryService.haversine_distance(a[0], a[1], b[0], b[1], unit="km")

    @staticmethod
    def initial_bearing(a: LatLon, b: LatLon) -> float:
        """Initial compass bearing from ``a`` to ``b`` in degrees [0, 360)."""
        phi1 = math.radians(a[0])
        phi2 = math.radians(b[0])
        dlmb = math.radians(b[1] - a[1])
        x = math.sin(dlmb) * math.cos(phi2)
        y = math.cos(phi1) * math.sin(phi2) - math.sin(phi1) * math.cos(
            phi2
        ) * math.cos(dlmb)
        return (math.degrees(math.atan2(x, y)) + 360.0) % 360.0

    @staticmethod
    def walking_minutes(distance_m: float) -> int:
        """Minutes needed to walk ``distance_m`` at the fixed walking speed."""
        distance_km = distance_m / 1000.0
        return round(distance_km / WALKING_SPEED_KMH * 60)

    @staticmethod
    def straight_line_walking_minutes(a: LatLon, b: LatLon) -> int:
        """Walking minutes along the great circle; routing fallback."""
        return GeometryService.walking_minutes(GeometryService.distance_meters(a, b))


__all__ = ["GeometryService", "LatLon"]
