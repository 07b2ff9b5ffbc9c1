"""Freshness gate state models."""

from dataclasses import dataclass
from enum import StrEnum
from typing import Any


class FreshnessState(StrEnum):
    EMPTY = "empty"
    FRESH = "fresh"
    STALE = "stale"


@dataclass(frozen=True)
class FreshnessRecord:
    """Last successful fetch for one data class.

    Replaced as a whole on every successful fetch so timestamp and payload
    never diverge.
    """

    data_class: str
    fetched_at: float
    payload: Any


@dataclass(frozen=True)
class FreshnessStatus:
    data_class: str
    state: FreshnessState
    age_seconds: float | None
    window_seconds: float
    in_flight: bool
