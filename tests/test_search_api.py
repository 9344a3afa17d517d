from datetime import datetime
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from search import api as search_api
from search.models import (
    Connection,
    ConnectionLeg,
    JourneyOptions,
    RouteResult,
    SearchResult,
    Station,
)

BERLIN = SearchResult(
    id="relation-62422",
    name="Berlin",
    display_name="Berlin, Deutschland",
    latitude=52.517,
    longitude=13.3889,
    type="city",
    country_code="de",
)
HBF = Station(
    id="8011160",
    name="Berlin Hbf",
    type="mixed",
    lat=52.5251,
    lon=13.3694,
    distance=120,
    importance=100,
    source="transit",
)


@pytest.fixture
def engine() -> MagicMock:
    engine = MagicMock()
    engine.search.search_locations = AsyncMock(return_value=[BERLIN])
    engine.search.search_places = AsyncMock(return_value=[])
    engine.search.reverse_geocode = AsyncMock(return_value=BERLIN)
    engine.stations.find_nearby_stations = AsyncMock(return_value=[HBF])
    engine.stations.search_stations = AsyncMock(return_value=[HBF])
    engine.journeys.search_connections = AsyncMock(return_value=[])
    engine.routes.get_walking_route = AsyncMock(return_value=None)
    return engine


@pytest.fixture
def client(engine: MagicMock):
    app = FastAPI()
    app.include_router(search_api.router)
    with patch("search.api.get_engine", return_value=engine):
        yield TestClient(app)


def test_locations_endpoint(client: TestClient, engine: MagicMock) -> None:
    response = client.get("/api/search/locations", params={"query": "Berlin", "limit": 3})

    assert response.status_code == 200
    body = response.json()
    assert body[0]["id"] == "relation-62422"
    assert body[0]["display_name"] == "Berlin, Deutschland"
    engine.search.search_locations.assert_awaited_once_with("Berlin", limit=3)


def test_places_endpoint_passes_proximity(client: TestClient, engine: MagicMock) -> None:
    response = client.get(
        "/api/search/places",
        params={"query": "Berlin", "category": "food", "lat": 52.5, "lon": 13.4},
    )

    assert response.status_code == 200
    assert response.json() == []
    engine.search.search_places.assert_awaited_once_with(
        "Berlin",
        limit=10,
        category="food",
        proximity=(52.5, 13.4),
    )


def test_places_endpoint_needs_both_coordinates_for_proximity(
    client: TestClient,
    engine: MagicMock,
) -> None:
    client.get("/api/search/places", params={"query": "Berlin", "lat": 52.5})

    assert engine.search.search_places.call_args.kwargs["proximity"] is None


def test_reverse_endpoint_not_found(client: TestClient, engine: MagicMock) -> None:
    engine.search.reverse_geocode.return_value = None

    response = client.get("/api/search/reverse", params={"lat": 48.85, "lon": 2.35})

    assert response.status_code == 404


def test_reverse_endpoint_validates_coordinates(client: TestClient) -> None:
    response = client.get("/api/search/reverse", params={"lat": 95, "lon": 2.35})

    assert response.status_code == 422


def test_nearby_stations_endpoint(client: TestClient, engine: MagicMock) -> None:
    response = client.get(
        "/api/search/stations/nearby",
        params={"lat": 52.5251, "lon": 13.3694, "max_results": 4},
    )

    assert response.status_code == 200
    assert response.json()[0]["source"] == "transit"
    engine.stations.find_nearby_stations.assert_awaited_once_with(52.5251, 13.3694, 4)


def test_station_name_search_endpoint(client: TestClient, engine: MagicMock) -> None:
    response = client.get("/api/search/stations", params={"query": "Berlin Hbf"})

    assert response.status_code == 200
    engine.stations.search_stations.assert_awaited_once_with("Berlin Hbf", 5)


def test_journeys_endpoint_applies_settings(client: TestClient, engine: MagicMock) -> None:
    departure = datetime(2024, 6, 1, 10, 0)
    leg = ConnectionLeg(
        mode="railway",
        line="RE1",
        departure=departure,
        arrival=datetime(2024, 6, 1, 10, 30),
        from_name="Berlin Hbf",
        to_name="Berlin Ostkreuz",
        duration=1800,
    )
    engine.journeys.search_connections.return_value = [
        Connection(
            departure=departure,
            arrival=datetime(2024, 6, 1, 10, 30),
            duration=1800,
            transfers=0,
            legs=(leg,),
        ),
    ]
    payload = {
        "origin": HBF.model_dump(),
        "destination": {**HBF.model_dump(), "id": "8011162", "name": "Ostkreuz"},
        "departure": "2024-06-01T10:00:00",
        "settings": {"regional_only": True},
    }

    response = client.post("/api/search/journeys", json=payload)

    assert response.status_code == 200
    body = response.json()
    assert body[0]["legs"][0]["from"] == "Berlin Hbf"
    assert body[0]["legs"][0]["to"] == "Berlin Ostkreuz"
    kwargs = engine.journeys.search_connections.call_args.kwargs
    assert kwargs["results"] == 10
    assert kwargs["options"] == JourneyOptions(
        regional_only=True,
        min_transfer_time=5,
        max_transfer_time=60,
    )


@pytest.mark.parametrize(
    ("extra", "expected_results"),
    [
        ({"settings": {"max_connections": 3}}, 3),
        ({"settings": {"max_connections": 3}, "results": 7}, 7),
        ({"results": 2}, 2),
    ],
)
def test_journeys_endpoint_result_count(
    client: TestClient,
    engine: MagicMock,
    extra: dict,
    expected_results: int,
) -> None:
    payload = {
        "origin": HBF.model_dump(),
        "destination": {**HBF.model_dump(), "id": "8011162", "name": "Ostkreuz"},
        **extra,
    }

    response = client.post("/api/search/journeys", json=payload)

    assert response.status_code == 200
    kwargs = engine.journeys.search_connections.call_args.kwargs
    assert kwargs["results"] == expected_results


def test_walking_route_endpoint(client: TestClient, engine: MagicMock) -> None:
    engine.routes.get_walking_route.return_value = RouteResult(
        coordinates=((52.5251, 13.3694), (52.5203, 13.3869)),
        distance=1350.0,
        duration=23,
    )

    response = client.get(
        "/api/search/route/walking",
        params={
            "from_lat": 52.5251,
            "from_lon": 13.3694,
            "to_lat": 52.5203,
            "to_lon": 13.3869,
        },
    )

    assert response.status_code == 200
    assert response.json()["coordinates"] == [[52.5251, 13.3694], [52.5203, 13.3869]]
    assert response.json()["duration"] == 23


def test_unexpected_engine_error_maps_to_500(client: TestClient, engine: MagicMock) -> None:
    engine.search.search_locations.side_effect = RuntimeError("boom")

    response = client.get("/api/search/locations", params={"query": "Berlin"})

    assert response.status_code == 500
