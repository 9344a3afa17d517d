"""
Search API for locations, places, stations and journeys.

Thin JSON layer over the search engine. The engine never raises for
provider trouble; empty lists are valid responses and missing single
results map to 404.
"""

import logging
from datetime import datetime
from typing import Annotated, Any

from fastapi import APIRouter, Query
from pydantic import BaseModel, Field

from core.api import api_route
from core.exceptions import ResourceNotFoundException
from search.engine import get_engine
from search.models import Station, TransportSettings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/search", tags=["search"])

Latitude = Annotated[float, Query(ge=-90, le=90)]
Longitude = Annotated[float, Query(ge=-180, le=180)]


class JourneyRequest(BaseModel):
    origin: Station
    destination: Station
    departure: datetime | str | None = None
    results: int | None = Field(default=None, ge=1, le=20)
    settings: dict[str, Any] | None = None


def _dump(items) -> list[dict[str, Any]]:
    return [item.model_dump(mode="json", by_alias=True) for item in items]


@router.get("/locations", response_model=list[dict[str, Any]])
@api_route(logger)
async def search_locations(
    query: Annotated[str, Query(description="City, address or postcode")],
    limit: Annotated[
        int,
        Query(ge=1, le=50, description="Maximum number of results"),
    ] = 10,
):
    """Search settlements and addresses in the supported countries."""
    results = await get_engine().search.search_locations(query, limit=limit)
    return _dump(results)


@router.get("/places", response_model=list[dict[str, Any]])
@api_route(logger)
async def search_places(
    query: Annotated[str, Query(description="Place name or keyword")],
    limit: Annotated[int, Query(ge=1, le=50)] = 10,
    category: Annotated[
        str | None,
        Query(description="food, museum, leisure, nature, shopping or attraction"),
    ] = None,
    lat: Annotated[float | None, Query(ge=-90, le=90)] = None,
    lon: Annotated[float | None, Query(ge=-180, le=180)] = None,
):
    """
    Search points of interest.

    When both ``lat`` and ``lon`` are given, results are re-ranked toward
    that point.
    """
    proximity = (lat, lon) if lat is not None and lon is not None else None
    results = await get_engine().search.search_places(
        query,
        limit=limit,
        category=category,
        proximity=proximity,
    )
    return _dump(results)


@router.get("/reverse", response_model=dict[str, Any])
@api_route(logger)
async def reverse_geocode(
    lat: Latitude,
    lon: Longitude,
    zoom: Annotated[int, Query(ge=0, le=18)] = 18,
):
    result = await get_engine().search.reverse_geocode(lat, lon, zoom=zoom)
    if result is None:
        msg = "No location found for these coordinates"
        raise ResourceNotFoundException(msg, {"lat": lat, "lon": lon})
    return result.model_dump(mode="json")


@router.get("/stations/nearby", response_model=list[dict[str, Any]])
@api_route(logger)
async def nearby_stations(
    lat: Latitude,
    lon: Longitude,
    max_results: Annotated[int, Query(ge=1, le=30)] = 8,
):
    stations = await get_engine().stations.find_nearby_stations(
        lat,
        lon,
        max_results,
    )
    return _dump(stations)


@router.get("/stations", response_model=list[dict[str, Any]])
@api_route(logger)
async def search_stations(
    query: Annotated[str, Query(description="Station name")],
    limit: Annotated[int, Query(ge=1, le=20)] = 5,
):
    stations = await get_engine().stations.search_stations(query, limit)
    return _dump(stations)


@router.post("/journeys", response_model=list[dict[str, Any]])
@api_route(logger)
async def search_journeys(request: JourneyRequest):
    """Plan connections using the caller's transport settings.

    Without an explicit ``results`` the caller's ``max_connections`` applies.
    """
    settings = TransportSettings.from_mapping(request.settings)
    connections = await get_engine().journeys.search_connections(
        request.origin,
        request.destination,
        departure=request.departure,
        results=request.results or settings.max_connections,
        options=settings.to_journey_options(),
    )
    return _dump(connections)


@router.get("/route/walking", response_model=dict[str, Any])
@api_route(logger)
async def walking_route(
    from_lat: Latitude,
    from_lon: Longitude,
    to_lat: Latitude,
    to_lon: Longitude,
):
    route = await get_engine().routes.get_walking_route(
        (from_lat, from_lon),
        (to_lat, to_lon),
    )
    if route is None:
        msg = "No walking route found"
        raise ResourceNotFoundException(msg)
    return route.model_dump(mode="json")
