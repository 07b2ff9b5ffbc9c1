"""Turn raw interval samples into finished daily and hourly forecasts."""

from collections.abc import Sequence

from skylar.forecast.bucketizer import bucketize, select_representative, temperature_range
from skylar.forecast.reconciler import reconcile
from skylar.models.common import TimezoneSpec
from skylar.models.weather import (
    CurrentWeather,
    DailyForecast,
    DayBucket,
    ForecastBundle,
    HourlyForecast,
    IntervalSample,
)

HOURLY_SLOTS = 8  # 24 hours of 3-hour samples


def build_daily_forecast(bucket: DayBucket, tz: TimezoneSpec = None) -> DailyForecast:
    representative = select_representative(bucket, tz)
    low, high = temperature_range(bucket)
    shown = reconcile(representative, bucket.samples)

    return DailyForecast(
        date=bucket.date,
        timestamp=representative.timestamp,
        temp_day=representative.temp,
        temp_min=low,
        temp_max=high,
        feels_like=representative.feels_like,
        humidity=representative.humidity,
        pressure=representative.pressure,
        wind_speed=representative.wind_speed,
        wind_direction=representative.wind_direction,
        clouds=representative.clouds,
        pop=representative.pop,
        rain=representative.rain_3h,
        condition=shown.condition,
        condition_corrected=shown is not representative,
    )


def build_daily_forecasts(
    samples: Sequence[IntervalSample], tz: TimezoneSpec = None
) -> list[DailyForecast]:
    return [build_daily_forecast(bucket, tz) for bucket in bucketize(samples, tz)]


def build_hourly_forecasts(
    samples: Sequence[IntervalSample], slots: int = HOURLY_SLOTS
) -> list[HourlyForecast]:
    ordered = sorted(samples, key=lambda s: s.timestamp)[:slots]
    return [
        HourlyForecast(
            timestamp=s.timestamp,
            temp=s.temp,
            feels_like=s.feels_like,
            humidity=s.humidity,
            wind_speed=s.wind_speed,
            wind_direction=s.wind_direction,
            clouds=s.clouds,
            pop=s.pop,
            condition=s.condition,
            rain=s.rain_3h,
        )
        for s in ordered
    ]


def build_forecast_bundle(
    current: CurrentWeather,
    samples: Sequence[IntervalSample],
    tz: TimezoneSpec = None,
    hourly_slots: int = HOURLY_SLOTS,
) -> ForecastBundle:
    """Assemble the full forecast. `tz` defaults to the location's offset."""
    zone = current.timezone if tz is None else tz
    return ForecastBundle(
        location=current.location,
        country=current.country,
        timezone=current.timezone,
        current=current,
        daily=build_daily_forecasts(samples, zone),
        hourly=build_hourly_forecasts(samples, hourly_slots),
    )


def current_only_bundle(current: CurrentWeather, warning: str) -> ForecastBundle:
    """Partial result: current conditions are good, the forecast is not."""
    return ForecastBundle(
        location=current.location,
        country=current.country,
        timezone=current.timezone,
        current=current,
        warning=warning,
    )
