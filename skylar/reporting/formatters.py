"""Output formatters for weather data: terminal text and JSON."""

import dataclasses
import json

from skylar.ai.assistant import unit_labels
from skylar.models.common import Units, local_datetime
from skylar.models.weather import CurrentWeather, ForecastBundle

# Icon code -> MaterialCommunityIcons name used by the mobile client
ICON_NAMES = {
    "01d": "weather-sunny",
    "01n": "weather-night",
    "02d": "weather-partly-cloudy",
    "02n": "weather-night-partly-cloudy",
    "03d": "weather-cloudy",
    "03n": "weather-cloudy",
    "04d": "weather-cloudy",
    "04n": "weather-cloudy",
    "09d": "weather-pouring",
    "09n": "weather-pouring",
    "10d": "weather-rainy",
    "10n": "weather-rainy",
    "11d": "weather-lightning",
    "11n": "weather-lightning",
    "13d": "weather-snowy",
    "13n": "weather-snowy",
    "50d": "weather-fog",
    "50n": "weather-fog",
}
DEFAULT_ICON_NAME = "weather-cloudy"

# Icon prefix -> terminal glyph
ICON_GLYPHS = {
    "01": "☀",
    "02": "⛅",
    "03": "☁",
    "04": "☁",
    "09": "🌧",
    "10": "🌦",
    "11": "⛈",
    "13": "❄",
    "50": "🌫",
}
NIGHT_CLEAR_GLYPH = "☾"
DEFAULT_GLYPH = "☁"


def icon_name(code: str) -> str:
    return ICON_NAMES.get(code, DEFAULT_ICON_NAME)


def icon_glyph(code: str) -> str:
    if code == "01n":
        return NIGHT_CLEAR_GLYPH
    return ICON_GLYPHS.get(code[:2], DEFAULT_GLYPH)


def format_current_text(w: CurrentWeather, units: Units = Units.METRIC) -> str:
    temp_unit, wind_unit = unit_labels(units)
    place = f"{w.location}, {w.country}" if w.country else w.location
    return "\n".join([
        f"=== {place} ===",
        f"{icon_glyph(w.icon)} {w.temperature}°{temp_unit} {w.description} "
        f"(feels like {w.feels_like}°{temp_unit})",
        f"Low/High: {w.temp_min}°{temp_unit} / {w.temp_max}°{temp_unit}",
        f"Humidity: {w.humidity}% | Pressure: {w.pressure} hPa",
        f"Wind: {w.wind_speed} {wind_unit} {w.wind_direction}°",
    ])


def format_forecast_text(bundle: ForecastBundle, units: Units = Units.METRIC) -> str:
    temp_unit, _ = unit_labels(units)
    lines = [format_current_text(bundle.current, units)]
    if bundle.warning:
        lines.append(f"WARNING: {bundle.warning}")

    if bundle.hourly:
        lines.append("")
        lines.append("Next hours:")
        for h in bundle.hourly:
            at = local_datetime(h.timestamp, bundle.timezone)
            lines.append(
                f"  {at:%H:%M} {icon_glyph(h.condition.icon_code)} "
                f"{h.temp}°{temp_unit} {h.condition.description} "
                f"({round(h.pop * 100)}% rain)"
            )

    if bundle.daily:
        lines.append("")
        lines.append("Daily:")
        for d in bundle.daily:
            day = local_datetime(d.timestamp, bundle.timezone)
            marker = " *" if d.condition_corrected else ""
            lines.append(
                f"  {day:%a %d %b} {icon_glyph(d.condition.icon_code)} "
                f"{d.temp_min}° / {d.temp_max}°{temp_unit} "
                f"{d.condition.description}{marker}"
            )
    return "\n".join(lines)


def to_dict(obj) -> dict:
    """Plain dict of a weather dataclass, with icon names added to conditions."""
    data = dataclasses.asdict(obj)
    _annotate_icons(data)
    return data


def _annotate_icons(node) -> None:
    if isinstance(node, dict):
        if "icon_code" in node:
            node["icon_name"] = icon_name(node["icon_code"])
        for value in node.values():
            _annotate_icons(value)
    elif isinstance(node, list):
        for item in node:
            _annotate_icons(item)


def format_json(obj) -> str:
    return json.dumps(to_dict(obj), indent=2, ensure_ascii=False)
