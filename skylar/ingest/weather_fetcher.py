"""Weather service: validated, gated, retried access to current and forecast data."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from skylar.errors import FetchError, WeatherFetchError, WeatherServiceError
from skylar.forecast.aggregator import (
    HOURLY_SLOTS,
    build_forecast_bundle,
    current_only_bundle,
)
from skylar.ingest.city import city_key
from skylar.ingest.freshness import FreshnessGate
from skylar.ingest.mapping import forecast_timezone, parse_current, parse_samples
from skylar.ingest.openweather_client import OpenWeatherClient
from skylar.models.common import Units
from skylar.models.weather import CurrentWeather, ForecastBundle

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _is_complete(bundle: ForecastBundle) -> bool:
    return bundle.warning is None


class WeatherService:
    """Entry point used by the CLI, the API and the AI assistant.

    City names are validated before any request. Every fetch goes through
    the freshness gate under ``weather:<city>``. Failed fetches are retried
    ``service_retries`` times with a fixed delay, then surfaced as
    WeatherServiceError carrying any cached payload.
    """

    def __init__(
        self,
        client: OpenWeatherClient,
        gate: FreshnessGate | None = None,
        units: Units = Units.METRIC,
        service_retries: int = 2,
        service_retry_delay: float = 2.0,
        hourly_slots: int = HOURLY_SLOTS,
    ):
        self.client = client
        self.gate = gate or FreshnessGate()
        self.units = Units(units)
        self.service_retries = service_retries
        self.service_retry_delay = service_retry_delay
        self.hourly_slots = hourly_slots

    async def current(self, city: str, force: bool = False) -> CurrentWeather:
        key = city_key(city)
        return await self._gated(
            f"weather:current:{key}", lambda: self._load_current(city), force
        )

    async def current_by_coordinates(
        self, lat: float, lon: float, force: bool = False
    ) -> CurrentWeather:
        async def load() -> CurrentWeather:
            raw = await self.client.get_current_by_coordinates(lat, lon)
            return parse_current(raw, self.units)

        return await self._gated(f"weather:current:{lat:.4f},{lon:.4f}", load, force)

    async def forecast(self, city: str, force: bool = False) -> ForecastBundle:
        """Current conditions plus daily and hourly forecasts.

        If only the forecast request fails the bundle still carries current
        weather and a warning. Such partial bundles are not cached.
        """
        key = city_key(city)
        return await self._gated(
            f"weather:{key}",
            lambda: self._load_forecast(
                self.client.get_current(city), lambda: self.client.get_forecast(city)
            ),
            force,
            cacheable=_is_complete,
        )

    async def forecast_by_coordinates(
        self, lat: float, lon: float, force: bool = False
    ) -> ForecastBundle:
        return await self._gated(
            f"weather:{lat:.4f},{lon:.4f}",
            lambda: self._load_forecast(
                self.client.get_current_by_coordinates(lat, lon),
                lambda: self.client.get_forecast_by_coordinates(lat, lon),
            ),
            force,
            cacheable=_is_complete,
        )

    async def refresh(self, city: str) -> ForecastBundle:
        """Force refresh, bypassing a fresh cache entry."""
        return await self.forecast(city, force=True)

    async def validate_city(self, city: str) -> bool:
        city_key(city)  # malformed names fail here, before the network
        return await self.client.validate_city(city)

    def cancel(self, city: str) -> None:
        """Drop the result of any in-flight fetch for this city."""
        key = city_key(city)
        self.gate.cancel(f"weather:{key}")
        self.gate.cancel(f"weather:current:{key}")

    def cached_forecast(self, city: str) -> ForecastBundle | None:
        return self.gate.peek(f"weather:{city_key(city)}")

    async def _load_current(self, city: str) -> CurrentWeather:
        return parse_current(await self.client.get_current(city), self.units)

    async def _load_forecast(
        self,
        current_request: Awaitable[dict],
        forecast_request: Callable[[], Awaitable[dict]],
    ) -> ForecastBundle:
        current = parse_current(await current_request, self.units)
        try:
            raw = await forecast_request()
        except WeatherFetchError as e:
            logger.warning(
                "Forecast fetch failed for %s, returning current weather only: %s",
                current.location, e,
            )
            return current_only_bundle(current, f"Forecast data unavailable: {e}")

        samples = parse_samples(raw, self.units)
        tz = forecast_timezone(raw) or current.timezone
        return build_forecast_bundle(current, samples, tz, self.hourly_slots)

    async def _gated(
        self,
        data_class: str,
        load: Callable[[], Awaitable[T]],
        force: bool,
        cacheable: Callable[[T], bool] | None = None,
    ) -> T:
        attempts = self.service_retries + 1
        for attempt in range(1, attempts):
            try:
                return await self._through_gate(data_class, load, force, cacheable)
            except FetchError as e:
                logger.warning(
                    "Fetch for %s failed (attempt %d/%d), retrying in %.1fs: %s",
                    data_class, attempt, attempts, self.service_retry_delay, e.cause,
                )
                await asyncio.sleep(self.service_retry_delay)

        try:
            return await self._through_gate(data_class, load, force, cacheable)
        except FetchError as e:
            raise WeatherServiceError(
                f"Failed to fetch weather after {attempts} attempts: {e.cause}",
                attempts=attempts,
                cached=e.cached,
            ) from e

    async def _through_gate(
        self,
        data_class: str,
        load: Callable[[], Awaitable[T]],
        force: bool,
        cacheable: Callable[[T], bool] | None,
    ) -> T:
        if force:
            return await self.gate.refresh(data_class, load, cacheable)
        return await self.gate.get(data_class, load, cacheable)
