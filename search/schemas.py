"""Provider payload records.

Each external provider's JSON is validated into one of these records at the
adapter boundary. Records that fail validation are dropped individually by
the normalizers; call sites never poke at raw dictionaries.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any

from pydantic import AliasChoices, BaseModel, BeforeValidator, ConfigDict, Field

from core.spatial import GeometryService, LatLon


class _Payload(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


def _id_to_str(value: Any) -> Any:
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return value


# HAFAS ids and platforms arrive as strings or bare numbers
ProviderId = Annotated[str, BeforeValidator(_id_to_str)]


# --- Nominatim ---------------------------------------------------------------


class NominatimAddress(_Payload):
    road: str | None = None
    house_number: str | None = None
    postcode: str | None = None
    city: str | None = None
    town: str | None = None
    village: str | None = None
    state: str | None = None
    country: str | None = None
    country_code: str | None = None

    @property
    def locality(self) -> str | None:
        return self.city or self.town or self.village or None


class NominatimPlace(_Payload):
    place_id: int | None = None
    osm_type: str | None = None
    osm_id: int | None = None
    lat: float = Field(ge=-90, le=90)
    lon: float = Field(ge=-180, le=180)
    display_name: str = Field(min_length=1)
    address: NominatimAddress | None = None
    type: str | None = None
    place_class: str | None = Field(default=None, alias="class")
    importance: float | None = None


# --- Transit (HAFAS REST) ----------------------------------------------------


class TransitLocation(_Payload):
    latitude: float | None = None
    longitude: float | None = None

    @property
    def coordinates(self) -> LatLon | None:
        return GeometryService.coerce_lat_lon(self.latitude, self.longitude)


class TransitProducts(_Payload):
    national_express: bool = Field(default=False, alias="nationalExpress")
    national: bool = False
    regional_express: bool = Field(
        default=False,
        validation_alias=AliasChoices("regionalExpress", "regionalExp"),
    )
    regional: bool = False
    suburban: bool = False
    bus: bool = False
    ferry: bool = False
    subway: bool = False
    tram: bool = False
    taxi: bool = False


class TransitStop(_Payload):
    id: ProviderId = Field(min_length=1)
    name: str = Field(min_length=1)
    location: TransitLocation | None = None
    products: TransitProducts | None = None
    distance: float | None = None


class TransitPlace(_Payload):
    """Origin/destination/stop reference inside a journey.

    Stops carry a nested ``location``; addresses and POIs carry the
    coordinates at the top level.
    """

    id: ProviderId | None = None
    name: str | None = None
    address: str | None = None
    location: TransitLocation | None = None
    latitude: float | None = None
    longitude: float | None = None

    @property
    def label(self) -> str:
        return self.name or self.address or ""

    @property
    def coordinates(self) -> LatLon | None:
        if self.location is not None:
            coords = self.location.coordinates
            if coords is not None:
                return coords
        return GeometryService.coerce_lat_lon(self.latitude, self.longitude)


class TransitLine(_Payload):
    name: str | None = None
    product: str | None = None
    mode: str | None = None


class TransitStopover(_Payload):
    stop: TransitPlace | None = None


class PolylineGeometry(_Payload):
    type: str | None = None
    coordinates: list[Any] = Field(default_factory=list)


class PolylineFeature(_Payload):
    type: str | None = None
    geometry: PolylineGeometry | None = None


class TransitPolyline(_Payload):
    features: list[PolylineFeature] = Field(default_factory=list)


class TransitPrice(_Payload):
    amount: float
    currency: str


class TransitLeg(_Payload):
    origin: TransitPlace | None = None
    destination: TransitPlace | None = None
    departure: datetime | None = None
    planned_departure: datetime | None = Field(default=None, alias="plannedDeparture")
    arrival: datetime | None = None
    planned_arrival: datetime | None = Field(default=None, alias="plannedArrival")
    line: TransitLine | None = None
    direction: str | None = None
    duration: float | None = None
    distance: float | None = None
    stopovers: list[TransitStopover] | None = None
    polyline: TransitPolyline | None = None

    @property
    def departure_time(self) -> datetime | None:
        return self.departure or self.planned_departure

    @property
    def arrival_time(self) -> datetime | None:
        return self.arrival or self.planned_arrival


class TransitJourney(_Payload):
    legs: list[TransitLeg] = Field(min_length=1)
    price: TransitPrice | None = None


class TransitDeparture(_Payload):
    when: datetime | None = None
    planned_when: datetime | None = Field(default=None, alias="plannedWhen")
    delay: int | None = None
    line: TransitLine | None = None
    direction: str | None = None
    platform: ProviderId | None = None


# --- Overpass ----------------------------------------------------------------


class OverpassCenter(_Payload):
    lat: float
    lon: float


class OverpassElement(_Payload):
    type: str
    id: int
    lat: float | None = None
    lon: float | None = None
    center: OverpassCenter | None = None
    tags: dict[str, str] = Field(default_factory=dict)

    @property
    def coordinates(self) -> LatLon | None:
        if self.center is not None:
            return GeometryService.coerce_lat_lon(self.center.lat, self.center.lon)
        return GeometryService.coerce_lat_lon(self.lat, self.lon)

    @property
    def label(self) -> str | None:
        return self.tags.get("name") or self.tags.get("ref") or None


# --- OSRM --------------------------------------------------------------------


class OsrmGeometry(_Payload):
    type: str | None = None
    coordinates: list[list[float]] = Field(default_factory=list)


class OsrmRoute(_Payload):
    distance: float = Field(ge=0)
    duration: float | None = None
    geometry: OsrmGeometry
