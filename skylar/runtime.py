"""Wires clients and services from a SkylarConfig for the CLI and the API."""

import logging

from skylar.ai.assistant import WeatherAssistant
from skylar.ai.gemini_client import GeminiClient
from skylar.ai.summaries import SummaryService
from skylar.config.schema import SkylarConfig
from skylar.ingest.freshness import FreshnessGate
from skylar.ingest.openweather_client import OpenWeatherClient
from skylar.ingest.weather_fetcher import WeatherService
from skylar.planning.planner import EventPlanner

logger = logging.getLogger(__name__)


class Runtime:
    """One freshness gate shared by weather and summary fetches."""

    def __init__(self, config: SkylarConfig):
        self.config = config
        self.gate = FreshnessGate(
            windows=config.freshness.windows(),
            fetch_timeout=config.freshness.fetch_timeout_seconds,
        )
        self.weather_client = OpenWeatherClient(
            api_key=config.weather.api_key,
            base_url=config.weather.base_url,
            timeout=config.weather.timeout_seconds,
            max_retries=config.weather.max_retries,
            retry_base_delay=config.weather.retry_base_delay,
        )
        self.weather = WeatherService(
            self.weather_client,
            gate=self.gate,
            units=config.weather.units,
            service_retries=config.service.service_retries,
            service_retry_delay=config.service.service_retry_delay,
            hourly_slots=config.service.hourly_slots,
        )

        self.ai_client: GeminiClient | None = None
        if config.ai.enabled:
            self.ai_client = GeminiClient(
                api_key=config.ai.api_key,
                primary_url=config.ai.primary_url,
                fallback_url=config.ai.fallback_url,
                timeout=config.ai.generate_timeout_seconds,
                max_retries=config.ai.max_retries,
                retry_base_delay=config.ai.retry_base_delay,
            )
        else:
            logger.info("AI assistant disabled by config")
        self.assistant = WeatherAssistant(
            self.ai_client,
            units=config.weather.units,
            classify_timeout=config.ai.classify_timeout_seconds,
            temperature=config.ai.temperature,
            max_output_tokens=config.ai.max_output_tokens,
        )
        self.summaries = SummaryService(self.assistant, self.gate)
        self.planner = EventPlanner(units=config.weather.units)

    async def aclose(self) -> None:
        await self.weather_client.aclose()
        if self.ai_client is not None:
            await self.ai_client.aclose()
