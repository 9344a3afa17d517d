"""Display formatting for distances, durations and clock times."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import datetime


def format_distance(meters: float) -> str:
    """``850m`` below one kilometre, ``1.2km`` above."""
    if meters < 1000:
        return f"{round(meters)}m"
    return f"{meters / 1000:.1f}km"


def format_duration(seconds: float) -> str:
    """Journey duration from seconds, e.g. ``1h 5min`` or ``12min``."""
    total_minutes = int(seconds // 60)
    hours, minutes = divmod(total_minutes, 60)
    if hours > 0:
        return f"{hours}h {minutes}min"
    return f"{minutes}min"


def format_duration_minutes(minutes: int) -> str:
    """Trip-stop duration from minutes, e.g. ``45 min``, ``2h`` or ``2h 5m``."""
    if minutes < 60:
        return f"{minutes} min"
    hours, remaining = divmod(minutes, 60)
    if remaining == 0:
        return f"{hours}h"
    return f"{hours}h {remaining}m"


def format_time(value: datetime) -> str:
    return value.strftime("%H:%M")


__all__ = [
    "format_distance",
    "format_duration",
    "format_duration_minutes",
    "format_time",
]
