from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from core.http.osrm import OsrmClient
from core.spatial import GeometryService, LatLon
from search.models import Connection, ConnectionLeg, RouteResult
from search.normalization import parse_osrm_route
from search.services.journey_service import JourneyService

if TYPE_CHECKING:
    from collections.abc import Sequence

logger = logging.getLogger(__name__)


def path_length_meters(coordinates: Sequence[LatLon]) -> float:
    return sum(
        GeometryService.distance_meters(a, b)
        for a, b in zip(coordinates, coordinates[1:])
    )


def straight_line_route(origin: LatLon, destination: LatLon) -> RouteResult:
    """Two-point route at the fixed walking speed."""
    distance = GeometryService.distance_meters(origin, destination)
    return RouteResult(
        coordinates=(origin, destination),
        distance=distance,
        duration=GeometryService.walking_minutes(distance),
    )


def reconstruct_leg_path(leg: ConnectionLeg) -> list[LatLon]:
    """Best available geometry for one leg, latitude-first.

    Tries the explicit polyline, then a chain through the stopovers, then
    the bare endpoints.
    """
    if leg.polyline:
        return [(lat, lon) for feature in leg.polyline for lon, lat in feature]

    inner = [stopover.coordinates for stopover in leg.stopovers or ()]
    path = [leg.origin_location, *inner, leg.destination_location]
    return [point for point in path if point is not None]


def reconstruct_journey_path(connection: Connection) -> RouteResult | None:
    """Concatenate transit-leg geometry; None when nothing is known."""
    coordinates: list[LatLon] = []
    for leg in connection.legs:
        if not leg.has_line:
            continue
        coordinates.extend(reconstruct_leg_path(leg))

    if not coordinates:
        return None
    return RouteResult(
        coordinates=tuple(coordinates),
        distance=path_length_meters(coordinates),
        duration=round(connection.duration / 60),
    )


class RouteService:
    """Walking and transit route geometry."""

    def __init__(
        self,
        osrm: OsrmClient | None = None,
        journeys: JourneyService | None = None,
    ) -> None:
        self._osrm = osrm or OsrmClient()
        self._journeys = journeys or JourneyService()

    async def get_walking_route(
        self,
        origin: LatLon,
        destination: LatLon,
        *,
        fallback: bool = True,
    ) -> RouteResult | None:
        """Foot route between two points.

        When routing fails and ``fallback`` is set, a straight line at the
        same walking speed is returned instead of None.
        """
        route = None
        try:
            raw = await self._osrm.foot_route(origin, destination)
        except Exception:
            logger.warning(
                "Walking route failed from %s to %s",
                origin,
                destination,
                exc_info=True,
            )
        else:
            if raw is not None:
                route = parse_osrm_route(raw)

        if route is None and fallback:
            logger.debug("Using straight-line walking route")
            return straight_line_route(origin, destination)
        return route

    async def get_transit_route(
        self,
        origin: LatLon,
        destination: LatLon,
    ) -> RouteResult | None:
        """Geometry of the first transit journey between two points."""
        connections = await self._journeys.search_between_coordinates(
            origin,
            destination,
            results=1,
        )
        if not connections:
            logger.debug("No transit journey between %s and %s", origin, destination)
            return None
        return reconstruct_journey_path(connections[0])
