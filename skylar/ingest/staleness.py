"""Staleness checks for cached weather and AI text."""

import math
from datetime import UTC, datetime


def age_seconds(fetched_at: float | None, now: float) -> float:
    """Seconds since a fetch. Never-fetched data is infinitely old."""
    if fetched_at is None:
        return math.inf
    return max(0.0, now - fetched_at)


def is_stale(fetched_at: float | None, window_seconds: float, now: float) -> bool:
    """Stale once the age is strictly greater than the window."""
    return age_seconds(fetched_at, now) > window_seconds


def staleness_minutes(fetched_at: float | None, now: float) -> float:
    """Get the age of cached data in minutes."""
    return age_seconds(fetched_at, now) / 60


def parse_timestamp(value: str | None) -> float | None:
    """Epoch seconds from an ISO 8601 string. Naive values are taken as UTC."""
    if not value:
        return None
    try:
        dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.timestamp()
