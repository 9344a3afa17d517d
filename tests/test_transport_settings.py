import pytest

from search.models import JourneyOptions, TransportSettings


def test_defaults() -> None:
    settings = TransportSettings()

    assert settings.min_transfer_time == 5
    assert settings.max_transfer_time == 60
    assert settings.regional_only is False
    assert settings.max_connections == 10


@pytest.mark.parametrize("data", [None, {}])
def test_from_mapping_empty_is_default(data) -> None:
    assert TransportSettings.from_mapping(data) == TransportSettings()


def test_from_mapping_overlays_partial_settings() -> None:
    settings = TransportSettings.from_mapping(
        {"regional_only": True, "min_transfer_time": 8, "theme": "dark"},
    )

    assert settings.regional_only is True
    assert settings.min_transfer_time == 8
    assert settings.max_transfer_time == 60
    assert settings.max_connections == 10


@pytest.mark.parametrize(
    "data",
    [
        {"min_transfer_time": -1},
        {"max_connections": 0},
        {"max_transfer_time": "an hour"},
    ],
)
def test_from_mapping_invalid_falls_back_to_defaults(data) -> None:
    assert TransportSettings.from_mapping(data) == TransportSettings()


def test_to_journey_options() -> None:
    settings = TransportSettings(min_transfer_time=3, regional_only=True)

    assert settings.to_journey_options() == JourneyOptions(
        regional_only=True,
        min_transfer_time=3,
        max_transfer_time=60,
    )
