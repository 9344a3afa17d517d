from unittest.mock import AsyncMock

import pytest

from core.exceptions import ExternalServiceException
from core.http.osrm import OsrmClient
from core.http.overpass import OverpassClient, build_station_query
from core.http.transit import TransitClient
from tests.http_fakes import FakeResponse, FakeSession


def _patch_session(
    monkeypatch: pytest.MonkeyPatch,
    module: str,
    session: FakeSession,
) -> None:
    monkeypatch.setattr(f"{module}.get_session", AsyncMock(return_value=session))


# --- Transit -----------------------------------------------------------------


@pytest.mark.asyncio
async def test_transit_nearby_stops_params(monkeypatch: pytest.MonkeyPatch) -> None:
    stops = [{"type": "stop", "id": "8011160", "name": "Berlin Hbf"}]
    session = FakeSession(get_responses=[FakeResponse(json_data=stops)])
    _patch_session(monkeypatch, "core.http.transit", session)

    result = await TransitClient().nearby_stops(52.52, 13.37, distance=5000, results=16)

    assert result == stops
    method, url, _ = session.requests[0]
    assert method == "GET"
    assert url == "https://v6.db.transport.rest/stops/nearby"
    assert session.params() == {
        "latitude": 52.52,
        "longitude": 13.37,
        "distance": 5000,
        "results": 16,
    }


@pytest.mark.asyncio
async def test_transit_journeys_unwraps_list(monkeypatch: pytest.MonkeyPatch) -> None:
    journeys = [{"legs": []}]
    payload = {"journeys": journeys, "realtimeDataUpdatedAt": 1}
    session = FakeSession(get_responses=[FakeResponse(json_data=payload)])
    _patch_session(monkeypatch, "core.http.transit", session)

    result = await TransitClient().journeys({"from": "8011160", "to": "8000261"})

    assert result == journeys
    assert session.requests[0].url.endswith("/journeys")
    assert session.params()["from"] == "8011160"


@pytest.mark.asyncio
async def test_transit_journeys_missing_list_is_empty(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    session = FakeSession(get_responses=[FakeResponse(json_data={})])
    _patch_session(monkeypatch, "core.http.transit", session)

    assert await TransitClient().journeys({}) == []


@pytest.mark.asyncio
async def test_transit_locations_only_requests_stops(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    session = FakeSession(get_responses=[FakeResponse(json_data=[])])
    _patch_session(monkeypatch, "core.http.transit", session)

    await TransitClient().locations("Hamburg", results=3)

    params = session.params()
    assert params["query"] == "Hamburg"
    assert params["results"] == 3
    assert params["stops"] == "true"
    assert params["addresses"] == "false"
    assert params["poi"] == "false"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload",
    [
        {"departures": [{"tripId": "1"}], "realtimeDataUpdatedAt": 1},
        [{"tripId": "1"}],
    ],
)
async def test_transit_departures_accepts_both_shapes(
    monkeypatch: pytest.MonkeyPatch,
    payload,
) -> None:
    session = FakeSession(get_responses=[FakeResponse(json_data=payload)])
    _patch_session(monkeypatch, "core.http.transit", session)

    result = await TransitClient().departures("8011160", duration=30)

    assert result == [{"tripId": "1"}]
    assert session.requests[0].url.endswith("/stops/8011160/departures")
    assert session.params() == {"duration": 30}


@pytest.mark.asyncio
async def test_transit_raises_on_http_error(monkeypatch: pytest.MonkeyPatch) -> None:
    session = FakeSession(get_responses=[FakeResponse(status=503, text_data="down")])
    _patch_session(monkeypatch, "core.http.transit", session)

    with pytest.raises(ExternalServiceException) as raised:
        await TransitClient().nearby_stops(52.5, 13.4, distance=5000, results=8)

    assert raised.value.details["status"] == 503


# --- Overpass ----------------------------------------------------------------


def test_build_station_query_covers_station_tags() -> None:
    query = build_station_query(52.52, 13.405, 5000)

    assert query.startswith("[out:json][timeout:25];")
    assert query.endswith("out center;")
    assert 'node["railway"="station"](around:5000,52.52,13.405);' in query
    assert 'node["railway"="halt"](around:5000,52.52,13.405);' in query
    assert 'node["public_transport"="station"](around:5000,52.52,13.405);' in query
    assert 'node["highway"="bus_stop"](around:5000,52.52,13.405);' in query
    assert 'way["railway"="station"](around:5000,52.52,13.405);' in query


@pytest.mark.asyncio
async def test_overpass_query_posts_form_body(monkeypatch: pytest.MonkeyPatch) -> None:
    elements = [{"type": "node", "id": 1, "lat": 52.5, "lon": 13.4, "tags": {}}]
    session = FakeSession(post_responses=[FakeResponse(json_data={"elements": elements})])
    _patch_session(monkeypatch, "core.http.overpass", session)

    result = await OverpassClient().query("[out:json];node(1);out;")

    assert result == elements
    method, url, kwargs = session.requests[0]
    assert method == "POST"
    assert url == "https://overpass-api.de/api/interpreter"
    assert kwargs["data"] == {"data": "[out:json];node(1);out;"}


@pytest.mark.asyncio
async def test_overpass_rejects_unexpected_payload(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    session = FakeSession(post_responses=[FakeResponse(json_data=["nope"])])
    _patch_session(monkeypatch, "core.http.overpass", session)

    with pytest.raises(ExternalServiceException):
        await OverpassClient().query("[out:json];")


# --- OSRM --------------------------------------------------------------------


@pytest.mark.asyncio
async def test_osrm_foot_route_orders_lon_lat(monkeypatch: pytest.MonkeyPatch) -> None:
    route = {"distance": 1200.0, "duration": 900.0, "geometry": {"coordinates": []}}
    session = FakeSession(
        get_responses=[FakeResponse(json_data={"code": "Ok", "routes": [route]})],
    )
    _patch_session(monkeypatch, "core.http.osrm", session)

    result = await OsrmClient().foot_route((52.52, 13.40), (52.51, 13.39))

    assert result == route
    assert session.requests[0].url == (
        "https://router.project-osrm.org/route/v1/foot/13.4,52.52;13.39,52.51"
    )
    assert session.params() == {"overview": "full", "geometries": "geojson"}


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response",
    [
        FakeResponse(json_data={"code": "NoRoute", "routes": []}),
        FakeResponse(json_data={"code": "Ok", "routes": []}),
        FakeResponse(status=400, json_data={"code": "InvalidQuery"}),
    ],
)
async def test_osrm_foot_route_none_without_route(
    monkeypatch: pytest.MonkeyPatch,
    response: FakeResponse,
) -> None:
    session = FakeSession(get_responses=[response])
    _patch_session(monkeypatch, "core.http.osrm", session)

    assert await OsrmClient().foot_route((52.52, 13.40), (52.51, 13.39)) is None
