"""Search engine services."""

from search.services.journey_service import JourneyService, to_transport_segment
from search.services.route_service import (
    RouteService,
    reconstruct_journey_path,
    reconstruct_leg_path,
)
from search.services.search_service import SearchService
from search.services.station_service import StationService, deduplicate_stations

__all__ = [
    "JourneyService",
    "RouteService",
    "SearchService",
    "StationService",
    "deduplicate_stations",
    "reconstruct_journey_path",
    "reconstruct_leg_path",
    "to_transport_segment",
]
