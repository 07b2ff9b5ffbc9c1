"""Event planning: weather lookup for a chosen time and better-time suggestions."""

import logging
import uuid
from dataclasses import replace
from datetime import datetime, timedelta

from skylar.ai.assistant import WeatherAssistant, unit_labels
from skylar.config.defaults import preference_for
from skylar.config.schema import ActivityPreference
from skylar.errors import AiGenerationError, PlanningError
from skylar.ingest.mapping import to_celsius, to_mps
from skylar.models.common import Units, local_datetime, resolve_tz
from skylar.models.planning import PlanAssessment, PlannedEvent, WeatherAtTime
from skylar.models.weather import ForecastBundle, HourlyForecast

logger = logging.getLogger(__name__)

SEARCH_WINDOW = timedelta(hours=24)
MAX_SUGGESTIONS = 3
TEMP_TOLERANCE = 5.0
RESCHEDULE_RAIN_PERCENT = 30


def format_slot(dt: datetime) -> str:
    """'Sat, Jun 14, 3:00 PM'."""
    hour = dt.hour % 12 or 12
    return f"{dt:%a, %b} {dt.day}, {hour}:{dt:%M %p}"


def _localize(when: datetime, bundle: ForecastBundle) -> datetime:
    tz = resolve_tz(bundle.timezone)
    if when.tzinfo is None:
        return when.replace(tzinfo=tz)
    return when.astimezone(tz)


def weather_for_time(bundle: ForecastBundle, when: datetime) -> WeatherAtTime | None:
    """Daily forecast for the date of `when` and the closest hourly row that day.

    Naive datetimes are taken to be in the forecast location's time.
    """
    when = _localize(when, bundle)
    day_key = when.date().isoformat()

    daily = next((d for d in bundle.daily if d.date == day_key), None)
    if daily is None:
        return None

    same_day = [
        h for h in bundle.hourly
        if local_datetime(h.timestamp, bundle.timezone).date() == when.date()
    ]
    if not same_day:
        return None

    target = when.timestamp()
    closest = min(same_day, key=lambda h: abs(h.timestamp - target))
    return WeatherAtTime(daily=daily, hourly=closest, requested_at=when)


def score_weather(
    row: HourlyForecast, prefs: ActivityPreference, units: Units = Units.METRIC
) -> float:
    """Preferences are metric; rows in other units are converted first."""
    temp = to_celsius(row.temp, units)
    wind = to_mps(row.wind_speed, units)
    score = 100.0
    score -= (row.pop or 0) * 100
    score -= min(abs(wind - 5), prefs.max_wind_speed) * 2
    score -= abs(temp - prefs.ideal_temp) * 3
    return score


def _suits(row: HourlyForecast, prefs: ActivityPreference, units: Units) -> bool:
    return (
        (row.pop or 0) <= prefs.max_rain_chance
        and to_mps(row.wind_speed, units) <= prefs.max_wind_speed
        and abs(to_celsius(row.temp, units) - prefs.ideal_temp) < TEMP_TOLERANCE
    )


def find_better_times(
    bundle: ForecastBundle,
    when: datetime,
    activity: str,
    units: Units = Units.METRIC,
) -> list[str]:
    """Up to three suitable times within 24 hours of `when`, best score first."""
    when = _localize(when, bundle)
    prefs = preference_for(activity)
    window = SEARCH_WINDOW.total_seconds()

    candidates = [
        row for row in bundle.hourly
        if abs(row.timestamp - when.timestamp()) <= window and _suits(row, prefs, units)
    ]
    candidates.sort(key=lambda row: score_weather(row, prefs, units), reverse=True)
    return [
        format_slot(local_datetime(row.timestamp, bundle.timezone))
        for row in candidates[:MAX_SUGGESTIONS]
    ]


def rain_percent(row: HourlyForecast) -> int:
    return round((row.pop or 0) * 100)


def recommendation_prompt(
    activity: str,
    description: str,
    weather: WeatherAtTime,
    better_times: list[str],
    units: Units = Units.METRIC,
) -> str:
    temp_unit, wind_unit = unit_labels(units)
    row = weather.hourly
    detail = f" ({description})" if description else ""
    when = weather.requested_at
    suggestion = (
        "one of these better times: " + ", ".join(better_times)
        if better_times
        else "a better time window"
    )
    return (
        f"You are Skylar, a weather assistant. A user is planning {activity}{detail} "
        f"on {when:%A, %B} {when.day} at {when:%H:%M}.\n"
        f"The weather forecast for that time is: {round(row.temp)}°{temp_unit}, "
        f"{row.condition.description}, {rain_percent(row)}% chance of rain, "
        f"wind speed of {round(row.wind_speed)} {wind_unit}.\n\n"
        "Should they reschedule this event due to weather concerns? If yes, why?\n"
        f"If they should reschedule, suggest {suggestion}.\n"
        "Keep your response conversational, under 4 sentences, and directly "
        "focused on whether this plan is a good idea considering the weather."
    )


def static_recommendation(
    activity: str,
    weather: WeatherAtTime,
    better_times: list[str],
    units: Units = Units.METRIC,
) -> str:
    temp_unit, _ = unit_labels(units)
    row = weather.hourly
    chance = rain_percent(row)
    if chance > RESCHEDULE_RAIN_PERCENT:
        verdict = f"you might want to reschedule your {activity}"
    else:
        verdict = f"{activity} conditions look good"
    text = (
        f"Based on the forecast ({row.condition.description}, "
        f"{round(row.temp)}°{temp_unit}, {chance}% chance of rain), {verdict}."
    )
    if better_times:
        text += f" Consider: {better_times[0]}"
    return text


class EventPlanner:
    """In-memory list of planned events for one session."""

    def __init__(self, units: Units = Units.METRIC):
        self.units = Units(units)
        self.events: list[PlannedEvent] = []

    def add(self, event: PlannedEvent) -> PlannedEvent:
        if not event.activity.strip():
            raise PlanningError("Please select an activity first")
        if not event.description.strip():
            raise PlanningError("Please enter a description for your event")
        if any(e.slot == event.slot for e in self.events):
            raise PlanningError("You already have an event planned at this time")

        if not event.event_id:
            event = replace(event, event_id=uuid.uuid4().hex[:12])
        self.events.append(event)
        logger.info("Planned %s at %s", event.activity, event.starts_at.isoformat())
        return event

    def remove(self, event_id: str) -> bool:
        before = len(self.events)
        self.events = [e for e in self.events if e.event_id != event_id]
        return len(self.events) < before

    async def assess(
        self,
        bundle: ForecastBundle,
        activity: str,
        when: datetime,
        description: str = "",
        assistant: WeatherAssistant | None = None,
    ) -> PlanAssessment:
        """Weather verdict for an activity at a time, AI-written when possible."""
        if not activity.strip():
            raise PlanningError("Please select an activity first")
        weather = weather_for_time(bundle, when)
        if weather is None:
            raise PlanningError("Could not retrieve weather data for the selected time")

        better = find_better_times(bundle, when, activity, self.units)
        if assistant is not None:
            prompt = recommendation_prompt(activity, description, weather, better, self.units)
            try:
                text = await assistant.generate(prompt)
            except AiGenerationError:
                logger.exception("AI recommendation failed for %s, using static text", activity)
            else:
                return PlanAssessment(
                    activity=activity,
                    weather=weather,
                    better_times=better,
                    recommendation=text,
                    ai_generated=True,
                )

        return PlanAssessment(
            activity=activity,
            weather=weather,
            better_times=better,
            recommendation=static_recommendation(activity, weather, better, self.units),
        )
