"""Map weather source JSON into domain models, converting units."""

import logging

from skylar.forecast.reconciler import warn_if_invalid
from skylar.models.common import Units
from skylar.models.weather import (
    Coordinates,
    CurrentWeather,
    IntervalSample,
    WeatherCondition,
)

logger = logging.getLogger(__name__)

KELVIN_OFFSET = 273.15
MPS_TO_MPH = 2.23694


def kelvin_to_celsius(kelvin: float) -> float:
    return round(kelvin - KELVIN_OFFSET, 1)


def kelvin_to_fahrenheit(kelvin: float) -> float:
    return round((kelvin - KELVIN_OFFSET) * 9 / 5 + 32, 1)


def convert_temperature(kelvin: float, units: Units) -> float:
    if units == Units.METRIC:
        return kelvin_to_celsius(kelvin)
    if units == Units.IMPERIAL:
        return kelvin_to_fahrenheit(kelvin)
    return round(kelvin, 2)


def convert_wind_speed(mps: float, units: Units) -> float:
    if units == Units.IMPERIAL:
        return round(mps * MPS_TO_MPH, 2)
    return mps


def to_celsius(temp: float, units: Units) -> float:
    """Inverse of convert_temperature, for comparing against metric thresholds."""
    if units == Units.IMPERIAL:
        return (temp - 32) * 5 / 9
    if units == Units.STANDARD:
        return temp - KELVIN_OFFSET
    return temp


def to_mps(speed: float, units: Units) -> float:
    if units == Units.IMPERIAL:
        return speed / MPS_TO_MPH
    return speed


def parse_condition(weather: list[dict]) -> WeatherCondition:
    first = weather[0] if weather else {}
    return WeatherCondition(
        category=first.get("main", ""),
        description=first.get("description", ""),
        icon_code=first.get("icon", ""),
        condition_id=int(first.get("id", 0)),
    )


def parse_current(data: dict, units: Units = Units.METRIC) -> CurrentWeather:
    """Map a /weather response (Kelvin) into CurrentWeather."""
    main = data["main"]
    sys_block = data.get("sys", {})
    wind = data.get("wind", {})
    coord = data.get("coord", {})
    condition = parse_condition(data.get("weather", []))
    warn_if_invalid(condition, data.get("name", ""))

    return CurrentWeather(
        location=data.get("name", ""),
        country=sys_block.get("country", ""),
        temperature=convert_temperature(main["temp"], units),
        temp_min=convert_temperature(main.get("temp_min", main["temp"]), units),
        temp_max=convert_temperature(main.get("temp_max", main["temp"]), units),
        feels_like=convert_temperature(main.get("feels_like", main["temp"]), units),
        humidity=int(main.get("humidity", 0)),
        pressure=int(main.get("pressure", 0)),
        wind_speed=convert_wind_speed(float(wind.get("speed", 0.0)), units),
        wind_direction=int(wind.get("deg", 0)),
        visibility=int(data.get("visibility", 0)),
        sunrise=int(sys_block.get("sunrise", 0)),
        sunset=int(sys_block.get("sunset", 0)),
        timezone=int(data.get("timezone", 0)),
        coordinates=Coordinates(
            lat=float(coord.get("lat", 0.0)), lon=float(coord.get("lon", 0.0))
        ),
        condition=condition,
    )


def parse_sample(item: dict, units: Units = Units.METRIC) -> IntervalSample:
    main = item["main"]
    wind = item.get("wind", {})
    rain = item.get("rain") or {}
    return IntervalSample(
        timestamp=int(item["dt"]),
        temp=convert_temperature(main["temp"], units),
        temp_min=convert_temperature(main.get("temp_min", main["temp"]), units),
        temp_max=convert_temperature(main.get("temp_max", main["temp"]), units),
        feels_like=convert_temperature(main.get("feels_like", main["temp"]), units),
        humidity=int(main.get("humidity", 0)),
        pressure=int(main.get("pressure", 0)),
        wind_speed=convert_wind_speed(float(wind.get("speed", 0.0)), units),
        wind_direction=int(wind.get("deg", 0)),
        clouds=int(item.get("clouds", {}).get("all", 0)),
        pop=float(item.get("pop", 0.0) or 0.0),
        condition=parse_condition(item.get("weather", [])),
        rain_3h=rain.get("3h"),
    )


def parse_samples(data: dict, units: Units = Units.METRIC) -> list[IntervalSample]:
    """Map a /forecast response into chronologically ordered samples.

    Entries missing the `dt` or `main` fields are skipped with a warning.
    """
    samples = []
    for item in data.get("list", []):
        if "dt" not in item or "main" not in item:
            logger.warning("Skipping malformed forecast entry: %s", item)
            continue
        samples.append(parse_sample(item, units))
    samples.sort(key=lambda s: s.timestamp)
    return samples


def forecast_timezone(data: dict) -> int:
    return int(data.get("city", {}).get("timezone", 0) or 0)
