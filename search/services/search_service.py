from __future__ import annotations

import logging
from typing import Final

from config import SEARCH_COUNTRIES
from core.constants import DEFAULT_REVERSE_ZOOM, DEFAULT_SEARCH_LIMIT, MIN_QUERY_LENGTH
from core.http.nominatim import NominatimClient
from core.spatial import GeometryService, LatLon
from search.models import SearchResult
from search.normalization import parse_nominatim_place

logger = logging.getLogger(__name__)

Viewbox = tuple[float, float, float, float]

LOCATION_TYPES: Final[frozenset[str]] = frozenset(
    {
        "city",
        "town",
        "village",
        "hamlet",
        "suburb",
        "neighbourhood",
        "administrative",
        "state",
        "region",
        "county",
        "municipality",
        "house",
        "residential",
        "postcode",
    },
)

POI_TYPES: Final[frozenset[str]] = frozenset(
    {
        "restaurant",
        "cafe",
        "bar",
        "pub",
        "fast_food",
        "food_court",
        "museum",
        "gallery",
        "theatre",
        "cinema",
        "arts_centre",
        "hotel",
        "hostel",
        "guest_house",
        "motel",
        "bed_and_breakfast",
        "attraction",
        "viewpoint",
        "artwork",
        "castle",
        "monument",
        "park",
        "garden",
        "nature_reserve",
        "beach",
        "water_park",
        "stadium",
        "sports_centre",
        "swimming_pool",
        "playground",
        "zoo",
        "aquarium",
        "theme_park",
        "shopping",
        "marketplace",
    },
)

POI_CLASSES: Final[frozenset[str]] = frozenset(
    {"tourism", "amenity", "leisure", "shop", "historic"},
)

CATEGORY_KEYWORDS: Final[dict[str, str]] = {
    "food": "restaurant cafe bar pub",
    "museum": "museum gallery arts",
    "leisure": "hotel entertainment cinema theatre",
    "nature": "park garden nature reserve",
    "shopping": "shop shopping mall market",
    "attraction": "attraction monument castle viewpoint",
}

IMPORTANCE_WEIGHT: Final[float] = 0.7
DISTANCE_WEIGHT: Final[float] = 0.3


def is_searchable(query: str | None) -> bool:
    return bool(query) and len(query.strip()) >= MIN_QUERY_LENGTH


def augment_query(query: str, category: str | None) -> str:
    """Append the category's keyword set to the query text."""
    query = query.strip()
    keywords = CATEGORY_KEYWORDS.get(category or "")
    if not keywords:
        return query
    return f"{query} {keywords}"


def is_location(result: SearchResult) -> bool:
    return result.type in LOCATION_TYPES


def is_place(result: SearchResult) -> bool:
    return result.type in POI_TYPES or result.category in POI_CLASSES


def proximity_score(result: SearchResult, anchor: LatLon) -> float:
    """Importance dominates; distant matches are penalized per 100 km."""
    distance_km = GeometryService.distance_km(
        anchor,
        (result.latitude, result.longitude),
    )
    importance = result.importance or 0.0
    return importance * IMPORTANCE_WEIGHT - (distance_km / 100) * DISTANCE_WEIGHT


class SearchService:
    """Location and place search against Nominatim.

    Results are restricted to ``SEARCH_COUNTRIES``. Provider failures are
    logged and degrade to empty results.
    """

    def __init__(self, nominatim: NominatimClient | None = None) -> None:
        self._nominatim = nominatim or NominatimClient()

    async def _search(
        self,
        query: str,
        *,
        limit: int,
        featuretype: str | None = None,
        viewbox: Viewbox | None = None,
        bounded: bool = False,
    ) -> list[SearchResult]:
        try:
            raw_results = await self._nominatim.search(
                query,
                limit=limit,
                country_codes=SEARCH_COUNTRIES,
                featuretype=featuretype,
                viewbox=viewbox,
                bounded=bounded,
            )
        except Exception:
            logger.warning("Nominatim search failed for %r", query, exc_info=True)
            return []

        results = []
        for raw in raw_results:
            result = parse_nominatim_place(raw)
            if result is not None:
                results.append(result)
        return results

    async def search_locations(
        self,
        query: str,
        *,
        limit: int = DEFAULT_SEARCH_LIMIT,
        viewbox: Viewbox | None = None,
        bounded: bool = False,
    ) -> list[SearchResult]:
        """Find settlements and addresses by free text."""
        if not is_searchable(query):
            return []

        results = await self._search(
            query.strip(),
            limit=limit,
            featuretype="settlement",
            viewbox=viewbox,
            bounded=bounded,
        )
        locations = [result for result in results if is_location(result)]
        logger.debug("Found %d locations for query: %s", len(locations), query)
        return locations

    async def search_places(
        self,
        query: str,
        *,
        limit: int = DEFAULT_SEARCH_LIMIT,
        category: str | None = None,
        proximity: LatLon | None = None,
        viewbox: Viewbox | None = None,
        bounded: bool = False,
    ) -> list[SearchResult]:
        """Find points of interest, optionally narrowed by category.

        With a ``proximity`` anchor the results are re-ranked by
        :func:`proximity_score`, highest first.
        """
        if not is_searchable(query):
            return []

        results = await self._search(
            augment_query(query, category),
            limit=limit,
            viewbox=viewbox,
            bounded=bounded,
        )
        places = [result for result in results if is_place(result)]
        if proximity is not None:
            places.sort(
                key=lambda result: proximity_score(result, proximity),
                reverse=True,
            )
        logger.debug("Found %d places for query: %s", len(places), query)
        return places

    async def reverse_geocode(
        self,
        lat: float,
        lon: float,
        *,
        zoom: int = DEFAULT_REVERSE_ZOOM,
    ) -> SearchResult | None:
        """Resolve a coordinate; None when it resolves to an unsupported country."""
        try:
            raw = await self._nominatim.reverse(lat, lon, zoom=zoom)
        except Exception:
            logger.warning(
                "Nominatim reverse failed for %s,%s",
                lat,
                lon,
                exc_info=True,
            )
            return None
        if raw is None:
            return None

        result = parse_nominatim_place(raw)
        if result is None:
            return None
        country_code = (result.country_code or "").lower()
        if country_code and country_code not in SEARCH_COUNTRIES:
            logger.debug("Reverse result outside search countries: %s", country_code)
            return None
        return result
