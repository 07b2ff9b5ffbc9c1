"""Planned outdoor events and the weather picked for them."""

from dataclasses import dataclass, field
from datetime import datetime

from skylar.models.weather import DailyForecast, HourlyForecast


@dataclass(frozen=True)
class PlannedEvent:
    activity: str
    description: str
    starts_at: datetime
    duration_hours: float = 1.0
    event_id: str = ""

    @property
    def slot(self) -> tuple[str, str]:
        """(date, time) pair used for conflict detection."""
        return self.starts_at.date().isoformat(), self.starts_at.strftime("%H:%M")


@dataclass(frozen=True)
class WeatherAtTime:
    daily: DailyForecast
    hourly: HourlyForecast
    requested_at: datetime


@dataclass(frozen=True)
class PlanAssessment:
    activity: str
    weather: WeatherAtTime
    better_times: list[str] = field(default_factory=list)
    recommendation: str = ""
    ai_generated: bool = False
