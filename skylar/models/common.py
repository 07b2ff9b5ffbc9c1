"""Common types and helpers shared across models."""

from datetime import UTC, datetime, timedelta, timezone, tzinfo
from enum import StrEnum
from typing import TypeAlias
from zoneinfo import ZoneInfo

TimezoneSpec: TypeAlias = str | int | tzinfo | None


class Units(StrEnum):
    METRIC = "metric"
    IMPERIAL = "imperial"
    STANDARD = "standard"


def resolve_tz(tz: TimezoneSpec) -> tzinfo:
    """Turn an IANA name, a UTC offset in seconds, or a tzinfo into a tzinfo.

    The weather source reports location time as a fixed offset in seconds,
    while user configuration names zones. None means UTC.
    """
    if tz is None:
        return UTC
    if isinstance(tz, tzinfo):
        return tz
    if isinstance(tz, int):
        return timezone(timedelta(seconds=tz))
    return ZoneInfo(tz)


def local_datetime(timestamp: int, tz: TimezoneSpec = None) -> datetime:
    return datetime.fromtimestamp(timestamp, tz=resolve_tz(tz))


def local_date_key(timestamp: int, tz: TimezoneSpec = None) -> str:
    """ISO date (YYYY-MM-DD) of an epoch timestamp in the given zone."""
    return local_datetime(timestamp, tz).date().isoformat()
