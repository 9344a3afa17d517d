"""Shared result model handed to the presentation layer.

All records are frozen value objects built fresh per call. Coordinates are
latitude-first.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError

logger = logging.getLogger(__name__)

StationType = Literal["railway", "bus", "mixed"]
StationSource = Literal["transit", "osm"]
LegMode = Literal["railway", "bus", "walking"]
LatLon = tuple[float, float]


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class SearchResult(_Frozen):
    """Normalized geocoder hit."""

    id: str
    name: str
    display_name: str
    latitude: float
    longitude: float
    type: str = "unknown"
    category: str | None = None
    address: str | None = None
    city: str | None = None
    state: str | None = None
    country: str | None = None
    country_code: str | None = None
    importance: float | None = None


class StationProducts(_Frozen):
    """Service-class flags reported by the transit provider."""

    national_express: bool = False
    national: bool = False
    regional_express: bool = False
    regional: bool = False
    suburban: bool = False
    bus: bool = False
    ferry: bool = False
    subway: bool = False
    tram: bool = False
    taxi: bool = False

    @property
    def has_rail(self) -> bool:
        return (
            self.national_express
            or self.national
            or self.regional_express
            or self.regional
            or self.suburban
        )


class Station(_Frozen):
    id: str
    name: str
    type: StationType
    lat: float
    lon: float
    distance: float = 0
    importance: int = Field(default=0, ge=0, le=100)
    products: StationProducts | None = None
    source: StationSource

    @property
    def coordinates(self) -> LatLon:
        return self.lat, self.lon


class Stopover(_Frozen):
    name: str
    latitude: float
    longitude: float

    @property
    def coordinates(self) -> LatLon:
        return self.latitude, self.longitude


class Price(_Frozen):
    amount: float
    currency: str


class ConnectionLeg(_Frozen):
    """One segment of a connection on a single mode/line.

    ``polyline`` keeps the provider's GeoJSON order (``[lon, lat]``) per
    feature; route reconstruction reorders it.
    """

    mode: LegMode
    line: str | None = None
    direction: str | None = None
    departure: datetime
    arrival: datetime
    from_name: str = Field(default="", serialization_alias="from")
    to_name: str = Field(default="", serialization_alias="to")
    duration: int = 0
    distance: float | None = None
    stopovers: tuple[Stopover, ...] | None = None
    polyline: tuple[tuple[tuple[float, float], ...], ...] | None = None
    origin_location: LatLon | None = None
    destination_location: LatLon | None = None

    @property
    def has_line(self) -> bool:
        return self.line is not None


class Connection(_Frozen):
    departure: datetime
    arrival: datetime
    duration: int
    transfers: int = Field(ge=0)
    legs: tuple[ConnectionLeg, ...]
    price: Price | None = None


class RouteResult(_Frozen):
    """Polyline for a single hop; ``distance`` in meters, ``duration`` in minutes."""

    coordinates: tuple[LatLon, ...]
    distance: float
    duration: int


class Departure(_Frozen):
    when: datetime | None = None
    planned_when: datetime | None = None
    delay: int | None = None
    line: str | None = None
    mode: LegMode = "railway"
    direction: str | None = None
    platform: str | None = None


class TransportSegment(_Frozen):
    """Leg summary stored on a trip stop."""

    mode: LegMode
    departure_time: str
    arrival_time: str
    duration_minutes: int
    route_name: str | None = None
    notes: str | None = None
    distance_km: float | None = None


class JourneyOptions(_Frozen):
    regional_only: bool = False
    min_transfer_time: int | None = None
    max_transfer_time: int | None = None
    max_transfers: int | None = None


class TransportSettings(BaseModel):
    """User transport preferences (minutes for transfer times)."""

    min_transfer_time: int = Field(default=5, ge=0)
    max_transfer_time: int = Field(default=60, ge=0)
    regional_only: bool = False
    max_connections: int = Field(default=10, ge=1)

    model_config = ConfigDict(extra="ignore")

    @classmethod
    def from_mapping(cls, data: dict[str, Any] | None) -> TransportSettings:
        """Overlay stored settings onto the defaults; invalid input yields defaults."""
        if not data:
            return cls()
        try:
            return cls.model_validate({**cls().model_dump(), **data})
        except ValidationError as exc:
            logger.warning("Ignoring invalid transport settings: %s", exc)
            return cls()

    def to_journey_options(self) -> JourneyOptions:
        return JourneyOptions(
            regional_only=self.regional_only,
            min_transfer_time=self.min_transfer_time,
            max_transfer_time=self.max_transfer_time,
        )


__all__ = [
    "Connection",
    "ConnectionLeg",
    "Departure",
    "JourneyOptions",
    "LatLon",
    "LegMode",
    "Price",
    "RouteResult",
    "SearchResult",
    "Station",
    "StationProducts",
    "StationSource",
    "StationType",
    "Stopover",
    "TransportSegment",
    "TransportSettings",
]
