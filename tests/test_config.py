import os
import unittest
from unittest.mock import patch

import config


class NominatimConfigTests(unittest.TestCase):
    def test_nominatim_urls_default(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            assert (
                config.get_nominatim_search_url()
                == "https://nominatim.openstreetmap.org/search"
            )
            assert (
                config.get_nominatim_reverse_url()
                == "https://nominatim.openstreetmap.org/reverse"
            )

    def test_nominatim_base_url_strips_trailing_slash(self) -> None:
        with patch.dict(
            os.environ,
            {"NOMINATIM_BASE_URL": " http://nominatim.local:8080/ "},
            clear=True,
        ):
            assert config.get_nominatim_search_url() == "http://nominatim.local:8080/search"

    def test_nominatim_user_agent_defaults(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            assert config.get_nominatim_user_agent() == "TravelPlannerApp/1.0"

    def test_nominatim_user_agent_present(self) -> None:
        with patch.dict(
            os.environ,
            {"NOMINATIM_USER_AGENT": "TripBoard/2.0 (ops@example.org)"},
            clear=True,
        ):
            assert config.get_nominatim_user_agent() == "TripBoard/2.0 (ops@example.org)"


class NominatimIntervalTests(unittest.TestCase):
    def test_min_interval_defaults_to_one_second(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            assert config.get_nominatim_min_interval() == 1.0

    def test_min_interval_reads_env(self) -> None:
        with patch.dict(os.environ, {"NOMINATIM_MIN_INTERVAL": "2.5"}, clear=True):
            assert config.get_nominatim_min_interval() == 2.5

    def test_min_interval_rejects_garbage(self) -> None:
        with patch.dict(os.environ, {"NOMINATIM_MIN_INTERVAL": "fast"}, clear=True):
            assert config.get_nominatim_min_interval() == 1.0

    def test_min_interval_rejects_negative(self) -> None:
        with patch.dict(os.environ, {"NOMINATIM_MIN_INTERVAL": "-1"}, clear=True):
            assert config.get_nominatim_min_interval() == 1.0


class ProviderConfigTests(unittest.TestCase):
    def test_provider_defaults(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            assert config.get_transit_base_url() == "https://v6.db.transport.rest"
            assert (
                config.get_overpass_url() == "https://overpass-api.de/api/interpreter"
            )
            assert config.get_osrm_base_url() == "https://router.project-osrm.org"

    def test_provider_overrides(self) -> None:
        with patch.dict(
            os.environ,
            {
                "TRANSIT_BASE_URL": "http://hafas.local/",
                "OVERPASS_URL": "http://overpass.local/api/interpreter",
                "OSRM_BASE_URL": "http://osrm.local:5000",
            },
            clear=True,
        ):
            assert config.get_transit_base_url() == "http://hafas.local"
            assert config.get_overpass_url() == "http://overpass.local/api/interpreter"
            assert config.get_osrm_base_url() == "http://osrm.local:5000"

    def test_search_countries_policy(self) -> None:
        assert config.SEARCH_COUNTRIES == ("de", "at", "ch", "li")
