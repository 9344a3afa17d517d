"""
Provider adapters.

Turn raw provider JSON into the shared result model. Every parser works on a
single record and returns None when that record is unusable, so one bad
item never takes down the batch.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Final

from pydantic import ValidationError

from core.constants import MAX_STATION_IMPORTANCE
from core.spatial import GeometryService, LatLon
from search.models import (
    Connection,
    ConnectionLeg,
    Departure,
    LegMode,
    Price,
    RouteResult,
    SearchResult,
    Station,
    StationProducts,
    StationType,
    Stopover,
)
from search.schemas import (
    NominatimPlace,
    OsrmRoute,
    OverpassElement,
    TransitDeparture,
    TransitJourney,
    TransitLeg,
    TransitLine,
    TransitPolyline,
    TransitStop,
)

if TYPE_CHECKING:
    from collections.abc import Iterable

logger = logging.getLogger(__name__)

# Additive weights per service class, capped at MAX_STATION_IMPORTANCE
PRODUCT_IMPORTANCE: Final[dict[str, int]] = {
    "national_express": 100,
    "national": 80,
    "regional_express": 60,
    "subway": 50,
    "regional": 40,
    "suburban": 30,
    "bus": 20,
    "tram": 20,
}

# (tag key, tag value, station type, importance), first match wins
OSM_STATION_PROFILES: Final[tuple[tuple[str, str, StationType, int], ...]] = (
    ("railway", "station", "railway", 60),
    ("railway", "halt", "railway", 40),
    ("public_transport", "station", "railway", 50),
)
OSM_DEFAULT_PROFILE: Final[tuple[StationType, int]] = ("bus", 20)


# --- Nominatim ---------------------------------------------------------------


def parse_nominatim_place(raw: Any) -> SearchResult | None:
    """Normalize one Nominatim hit; None when coordinates or name are unusable."""
    try:
        place = NominatimPlace.model_validate(raw)
    except ValidationError as exc:
        logger.debug("Dropping malformed Nominatim record: %s", exc.errors()[:1])
        return None

    address = place.address
    city = address.locality if address else None
    address_line = ""
    if address:
        address_line = " ".join(
            part
            for part in (address.road, address.house_number, address.postcode, city)
            if part
        )

    return SearchResult(
        id=f"{place.osm_type}-{place.osm_id}",
        name=place.display_name.split(",")[0].strip(),
        display_name=place.display_name,
        latitude=place.lat,
        longitude=place.lon,
        type=place.type or "unknown",
        category=place.place_class,
        address=address_line or place.display_name,
        city=city,
        state=address.state if address else None,
        country=address.country if address else None,
        country_code=address.country_code if address else None,
        importance=place.importance,
    )


# --- Transit stops -----------------------------------------------------------


def station_type_from_products(products: StationProducts) -> StationType:
    if products.has_rail and products.bus:
        return "mixed"
    if products.has_rail:
        return "railway"
    return "bus"


def station_importance(products: StationProducts) -> int:
    score = sum(
        weight
        for product, weight in PRODUCT_IMPORTANCE.items()
        if getattr(products, product)
    )
    return min(score, MAX_STATION_IMPORTANCE)


def parse_transit_stop(raw: Any) -> Station | None:
    """Normalize one transit stop; stops without usable coordinates are dropped."""
    try:
        stop = TransitStop.model_validate(raw)
    except ValidationError as exc:
        logger.debug("Dropping malformed transit stop: %s", exc.errors()[:1])
        return None

    coords = stop.location.coordinates if stop.location else None
    if coords is None:
        logger.debug("Dropping transit stop %s without coordinates", stop.id)
        return None

    products = StationProducts.model_validate(
        stop.products.model_dump() if stop.products else {},
    )
    return Station(
        id=stop.id,
        name=stop.name,
        type=station_type_from_products(products),
        lat=coords[0],
        lon=coords[1],
        distance=stop.distance or 0,
        importance=station_importance(products),
        products=products,
        source="transit",
    )


# --- Overpass ----------------------------------------------------------------


def osm_station_profile(tags: dict[str, str]) -> tuple[StationType, int]:
    for key, value, station_type, importance in OSM_STATION_PROFILES:
        if tags.get(key) == value:
            return station_type, importance
    return OSM_DEFAULT_PROFILE


def parse_overpass_element(raw: Any, origin: LatLon) -> Station | None:
    """Normalize one Overpass element relative to the query point."""
    try:
        element = OverpassElement.model_validate(raw)
    except ValidationError as exc:
        logger.debug("Dropping malformed Overpass element: %s", exc.errors()[:1])
        return None

    name = element.label
    if not name:
        return None
    coords = element.coordinates
    if coords is None:
        return None

    station_type, importance = osm_station_profile(element.tags)
    return Station(
        id=f"osm-{element.id}",
        name=name,
        type=station_type,
        lat=coords[0],
        lon=coords[1],
        distance=round(GeometryService.distance_meters(origin, coords)),
        importance=importance,
        source="osm",
    )


# --- Journeys ----------------------------------------------------------------


def leg_mode(line: TransitLine | None) -> LegMode:
    if line is None:
        return "walking"
    return "bus" if line.mode == "bus" else "railway"


def count_transfers(legs: Iterable[ConnectionLeg]) -> int:
    """Line-bearing legs minus one, never negative."""
    return max(0, sum(1 for leg in legs if leg.has_line) - 1)


def _polyline_features(
    polyline: TransitPolyline | None,
) -> tuple[tuple[tuple[float, float], ...], ...] | None:
    """Extract ``[lon, lat]`` sequences per feature.

    HAFAS emits one Point feature per vertex; LineString features are
    accepted as well.
    """
    if polyline is None or not polyline.features:
        return None

    features: list[tuple[tuple[float, float], ...]] = []
    for feature in polyline.features:
        geometry = feature.geometry
        if geometry is None or not geometry.coordinates:
            continue
        raw_points = geometry.coordinates
        if geometry.type == "Point" or not isinstance(raw_points[0], (list, tuple)):
            raw_points = [raw_points]

        points: list[tuple[float, float]] = []
        for point in raw_points:
            if not isinstance(point, (list, tuple)) or len(point) < 2:
                continue
            coords = GeometryService.coerce_lat_lon(point[1], point[0])
            if coords is None:
                continue
            points.append((coords[1], coords[0]))
        if points:
            features.append(tuple(points))

    return tuple(features) or None


def _stopovers(leg: TransitLeg) -> tuple[Stopover, ...] | None:
    if leg.stopovers is None:
        return None
    stopovers: list[Stopover] = []
    for stopover in leg.stopovers:
        stop = stopover.stop
        if stop is None:
            continue
        coords = stop.coordinates
        if coords is None:
            continue
        stopovers.append(
            Stopover(name=stop.label, latitude=coords[0], longitude=coords[1]),
        )
    return tuple(stopovers)


def parse_transit_leg(leg: TransitLeg) -> ConnectionLeg | None:
    departure = leg.departure_time
    arrival = leg.arrival_time
    if departure is None or arrival is None:
        return None

    if leg.duration is not None:
        duration = round(leg.duration)
    else:
        duration = round((arrival - departure).total_seconds())

    return ConnectionLeg(
        mode=leg_mode(leg.line),
        line=leg.line.name if leg.line else None,
        direction=leg.direction,
        departure=departure,
        arrival=arrival,
        from_name=leg.origin.label if leg.origin else "",
        to_name=leg.destination.label if leg.destination else "",
        duration=duration,
        distance=leg.distance,
        stopovers=_stopovers(leg),
        polyline=_polyline_features(leg.polyline),
        origin_location=leg.origin.coordinates if leg.origin else None,
        destination_location=leg.destination.coordinates if leg.destination else None,
    )


def parse_journey(raw: Any) -> Connection | None:
    """Normalize one raw journey; None when any leg lacks timestamps."""
    try:
        journey = TransitJourney.model_validate(raw)
    except ValidationError as exc:
        logger.debug("Dropping malformed journey: %s", exc.errors()[:1])
        return None

    legs: list[ConnectionLeg] = []
    for raw_leg in journey.legs:
        leg = parse_transit_leg(raw_leg)
        if leg is None:
            logger.debug("Dropping journey with an untimed leg")
            return None
        legs.append(leg)

    departure = legs[0].departure
    arrival = legs[-1].arrival
    price = None
    if journey.price is not None:
        price = Price(amount=journey.price.amount, currency=journey.price.currency)

    return Connection(
        departure=departure,
        arrival=arrival,
        duration=round((arrival - departure).total_seconds()),
        transfers=count_transfers(legs),
        legs=tuple(legs),
        price=price,
    )


def parse_departure(raw: Any) -> Departure | None:
    try:
        departure = TransitDeparture.model_validate(raw)
    except ValidationError as exc:
        logger.debug("Dropping malformed departure: %s", exc.errors()[:1])
        return None
    return Departure(
        when=departure.when,
        planned_when=departure.planned_when,
        delay=departure.delay,
        line=departure.line.name if departure.line else None,
        mode=leg_mode(departure.line),
        direction=departure.direction,
        platform=departure.platform,
    )


# --- OSRM --------------------------------------------------------------------


def parse_osrm_route(raw: Any) -> RouteResult | None:
    """Normalize an OSRM foot route.

    The provider's own duration is discarded; duration is recomputed at the
    fixed walking speed so it agrees with every other estimate in the engine.
    """
    try:
        route = OsrmRoute.model_validate(raw)
    except ValidationError as exc:
        logger.debug("Dropping malformed OSRM route: %s", exc.errors()[:1])
        return None

    coordinates: list[LatLon] = []
    for point in route.geometry.coordinates:
        if len(point) < 2:
            continue
        coords = GeometryService.coerce_lat_lon(point[1], point[0])
        if coords is not None:
            coordinates.append(coords)
    if not coordinates:
        return None

    return RouteResult(
        coordinates=tuple(coordinates),
        distance=route.distance,
        duration=GeometryService.walking_minutes(route.distance),
    )
