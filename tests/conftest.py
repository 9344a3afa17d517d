import sys
from pathlib import Path

TESTS_DIR = Path(__file__).resolve().parent
sys.path[:0] = [p for p in (str(TESTS_DIR.parent), str(TESTS_DIR)) if p not in sys.path]

import pytest
from network_blocker import install_network_blocker

from core.http.circuit_breaker import reset_all_breakers
from search.engine import reset_engine


@pytest.fixture(autouse=True)
def offline_providers(monkeypatch: pytest.MonkeyPatch) -> None:
    """Identify as a test client and refuse real provider traffic."""
    monkeypatch.setenv("NOMINATIM_USER_AGENT", "TravelPlannerTests/1.0")
    install_network_blocker(monkeypatch)


@pytest.fixture(autouse=True)
def fresh_provider_state():
    """Closed breakers and a new engine for every test."""
    reset_all_breakers()
    reset_engine()
    yield
    reset_all_breakers()
    reset_engine()
