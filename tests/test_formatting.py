from datetime import datetime

import pytest

from search.formatting import (
    format_distance,
    format_duration,
    format_duration_minutes,
    format_time,
)


@pytest.mark.parametrize(
    ("meters", "expected"),
    [(0, "0m"), (850, "850m"), (999.4, "999m"), (1000, "1.0km"), (1234, "1.2km")],
)
def test_format_distance(meters, expected) -> None:
    assert format_distance(meters) == expected


@pytest.mark.parametrize(
    ("seconds", "expected"),
    [(59, "0min"), (720, "12min"), (3900, "1h 5min"), (7200, "2h 0min")],
)
def test_format_duration(seconds, expected) -> None:
    assert format_duration(seconds) == expected


@pytest.mark.parametrize(
    ("minutes", "expected"),
    [(45, "45 min"), (60, "1h"), (120, "2h"), (125, "2h 5m")],
)
def test_format_duration_minutes(minutes, expected) -> None:
    assert format_duration_minutes(minutes) == expected


def test_format_time() -> None:
    assert format_time(datetime(2024, 6, 1, 7, 5)) == "07:05"
