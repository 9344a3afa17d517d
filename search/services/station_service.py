from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from core.constants import (
    DEFAULT_MAX_STATIONS,
    DUPLICATE_STATION_RADIUS_M,
    MIN_PRIMARY_STATIONS,
    MIN_QUERY_LENGTH,
    STATION_SEARCH_RADIUS_M,
)
from core.http.overpass import OverpassClient, build_station_query
from core.http.transit import TransitClient
from core.spatial import GeometryService, LatLon
from search.normalization import parse_overpass_element, parse_transit_stop

if TYPE_CHECKING:
    from collections.abc import Iterable

    from search.models import Station

logger = logging.getLogger(__name__)


def is_duplicate(a: Station, b: Station) -> bool:
    """Same place: closer than 100 m and one name contains the other."""
    if GeometryService.distance_meters(a.coordinates, b.coordinates) >= (
        DUPLICATE_STATION_RADIUS_M
    ):
        return False
    name_a = a.name.lower()
    name_b = b.name.lower()
    return name_a in name_b or name_b in name_a


def deduplicate_stations(stations: Iterable[Station]) -> list[Station]:
    """Merge stations from both sources, keeping order of first appearance.

    A transit-sourced station replaces an OSM-sourced duplicate in place;
    otherwise the first-seen record wins.
    """
    kept: list[Station] = []
    for station in stations:
        for index, existing in enumerate(kept):
            if not is_duplicate(existing, station):
                continue
            if station.source == "transit" and existing.source == "osm":
                kept[index] = station
            break
        else:
            kept.append(station)
    return kept


def rank_stations(stations: Iterable[Station], max_results: int) -> list[Station]:
    return sorted(stations, key=lambda station: station.distance)[:max_results]


class StationService:
    """Station discovery over the transit network and OpenStreetMap."""

    def __init__(
        self,
        transit: TransitClient | None = None,
        overpass: OverpassClient | None = None,
    ) -> None:
        self._transit = transit or TransitClient()
        self._overpass = overpass or OverpassClient()

    async def _transit_stations(self, origin: LatLon, max_results: int) -> list[Station]:
        try:
            raw_stops = await self._transit.nearby_stops(
                origin[0],
                origin[1],
                distance=STATION_SEARCH_RADIUS_M,
                results=max_results * 2,
            )
        except Exception:
            logger.warning("Transit nearby lookup failed at %s", origin, exc_info=True)
            return []

        stations = []
        for raw in raw_stops:
            station = parse_transit_stop(raw)
            if station is not None:
                stations.append(station)
        return stations

    async def _osm_stations(self, origin: LatLon) -> list[Station]:
        query = build_station_query(origin[0], origin[1], STATION_SEARCH_RADIUS_M)
        try:
            elements = await self._overpass.query(query)
        except Exception:
            logger.warning("Overpass station lookup failed at %s", origin, exc_info=True)
            return []

        stations = []
        for raw in elements:
            station = parse_overpass_element(raw, origin)
            if station is not None:
                stations.append(station)
        return stations

    async def find_nearby_stations(
        self,
        lat: float,
        lon: float,
        max_results: int = DEFAULT_MAX_STATIONS,
        *,
        fetch_concurrently: bool = False,
    ) -> list[Station]:
        """Return up to ``max_results`` stations near a point, closest first.

        OpenStreetMap is consulted only when the transit provider yields
        fewer than three stations. With ``fetch_concurrently`` both sources
        are queried up front and merged after both complete.
        """
        origin = GeometryService.coerce_lat_lon(lat, lon)
        if origin is None:
            logger.warning("Invalid coordinates for station search: %s,%s", lat, lon)
            return []

        if fetch_concurrently:
            primary, secondary = await asyncio.gather(
                self._transit_stations(origin, max_results),
                self._osm_stations(origin),
            )
            if len(primary) >= MIN_PRIMARY_STATIONS:
                return rank_stations(primary, max_results)
        else:
            primary = await self._transit_stations(origin, max_results)
            if len(primary) >= MIN_PRIMARY_STATIONS:
                return rank_stations(primary, max_results)
            secondary = await self._osm_stations(origin)

        merged = deduplicate_stations([*primary, *secondary])
        logger.debug(
            "Merged %d transit and %d OSM stations into %d",
            len(primary),
            len(secondary),
            len(merged),
        )
        return rank_stations(merged, max_results)

    async def search_stations(self, query: str, limit: int = 5) -> list[Station]:
        """Look up transit stations by name."""
        if not query or len(query.strip()) < MIN_QUERY_LENGTH:
            return []
        try:
            raw_locations = await self._transit.locations(query.strip(), results=limit)
        except Exception:
            logger.warning("Transit station search failed for %r", query, exc_info=True)
            return []

        stations = []
        for raw in raw_locations:
            if isinstance(raw, dict) and raw.get("type") not in (None, "stop", "station"):
                continue
            station = parse_transit_stop(raw)
            if station is not None:
                stations.append(station)
        return stations[:limit]
