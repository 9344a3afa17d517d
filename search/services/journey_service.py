from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from core.constants import DEFAULT_DEPARTURES_WINDOW_MIN, DEFAULT_MAX_CONNECTIONS
from core.http.transit import TransitClient
from core.spatial import LatLon
from search.formatting import format_time
from search.models import (
    Connection,
    ConnectionLeg,
    Departure,
    JourneyOptions,
    Station,
    TransportSegment,
)
from search.normalization import parse_departure, parse_journey

logger = logging.getLogger(__name__)


def parse_departure_time(value: datetime | str | None) -> datetime | None:
    """Accept a datetime or ISO string; anything unparseable means "now"."""
    if value is None or isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value).strip())
    except ValueError:
        logger.debug("Ignoring invalid departure time %r", value)
        return None


def station_params(prefix: str, station: Station) -> dict[str, Any]:
    """Address a station by provider id, or by coordinates when it came from OSM."""
    if station.source == "transit":
        return {prefix: station.id}
    return coordinate_params(prefix, station.coordinates, station.name)


def coordinate_params(prefix: str, point: LatLon, label: str | None = None) -> dict[str, Any]:
    lat, lon = point
    return {
        f"{prefix}.latitude": lat,
        f"{prefix}.longitude": lon,
        f"{prefix}.address": label or f"{lat:.5f},{lon:.5f}",
    }


def option_params(options: JourneyOptions | None) -> dict[str, Any]:
    if options is None:
        return {}
    params: dict[str, Any] = {}
    if options.regional_only:
        params["nationalExpress"] = "false"
        params["national"] = "false"
    if options.max_transfers is not None:
        params["transfers"] = options.max_transfers
    if options.min_transfer_time:
        params["transferTime"] = options.min_transfer_time
    return params


def build_journey_params(
    origin: dict[str, Any],
    destination: dict[str, Any],
    *,
    departure: datetime | str | None = None,
    results: int = DEFAULT_MAX_CONNECTIONS,
    options: JourneyOptions | None = None,
) -> dict[str, Any]:
    params: dict[str, Any] = {
        **origin,
        **destination,
        "results": results,
        "stopovers": "true",
        "polyline": "true",
    }
    when = parse_departure_time(departure)
    if when is not None:
        params["departure"] = when.isoformat()
    params.update(option_params(options))
    return params


def to_transport_segment(leg: ConnectionLeg) -> TransportSegment:
    """Summarize a leg for storage on a trip stop."""
    distance_km = None
    notes = None
    if leg.distance:
        distance_km = round(leg.distance / 1000, 2)
        notes = f"Distance: {leg.distance / 1000:.2f} km"
    return TransportSegment(
        mode=leg.mode,
        departure_time=format_time(leg.departure),
        arrival_time=format_time(leg.arrival),
        duration_minutes=round(leg.duration / 60),
        route_name=leg.line,
        notes=notes,
        distance_km=distance_km,
    )


class JourneyService:
    """Journey planning and departure boards on the transit network."""

    def __init__(self, transit: TransitClient | None = None) -> None:
        self._transit = transit or TransitClient()

    async def _journeys(self, params: dict[str, Any]) -> list[Connection]:
        try:
            raw_journeys = await self._transit.journeys(params)
        except Exception:
            logger.warning("Transit journey search failed", exc_info=True)
            return []

        connections = []
        for raw in raw_journeys:
            connection = parse_journey(raw)
            if connection is not None:
                connections.append(connection)
        logger.debug("Assembled %d of %d journeys", len(connections), len(raw_journeys))
        return connections

    async def search_connections(
        self,
        origin: Station,
        destination: Station,
        *,
        departure: datetime | str | None = None,
        results: int = DEFAULT_MAX_CONNECTIONS,
        options: JourneyOptions | None = None,
    ) -> list[Connection]:
        """Plan connections between two discovered stations."""
        params = build_journey_params(
            station_params("from", origin),
            station_params("to", destination),
            departure=departure,
            results=results,
            options=options,
        )
        return await self._journeys(params)

    async def search_between_coordinates(
        self,
        origin: LatLon,
        destination: LatLon,
        *,
        departure: datetime | str | None = None,
        results: int = 1,
    ) -> list[Connection]:
        params = build_journey_params(
            coordinate_params("from", origin),
            coordinate_params("to", destination),
            departure=departure,
            results=results,
        )
        return await self._journeys(params)

    async def get_departures(
        self,
        station_id: str,
        duration: int = DEFAULT_DEPARTURES_WINDOW_MIN,
    ) -> list[Departure]:
        """Upcoming departures at a station within ``duration`` minutes."""
        try:
            raw_departures = await self._transit.departures(station_id, duration=duration)
        except Exception:
            logger.warning("Departures lookup failed for %s", station_id, exc_info=True)
            return []

        departures = []
        for raw in raw_departures:
            departure = parse_departure(raw)
            if departure is not None:
                departures.append(departure)
        return departures
