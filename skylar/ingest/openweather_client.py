"""OpenWeatherMap API client with retry and rate limit handling."""

import asyncio
import logging

import httpx

from skylar.errors import CityValidationError, WeatherFetchError
from skylar.ingest.city import city_query

logger = logging.getLogger(__name__)

OPENWEATHER_BASE_URL = "https://api.openweathermap.org/data/2.5"
ICON_URL_TEMPLATE = "https://openweathermap.org/img/wn/{code}@2x.png"
RETRYABLE_STATUS = frozenset({429, 500, 502, 503, 504})


def icon_url(icon_code: str) -> str:
    return ICON_URL_TEMPLATE.format(code=icon_code)


class OpenWeatherClient:
    """Raw JSON access to /weather and /forecast. Temperatures stay in Kelvin."""

    def __init__(
        self,
        api_key: str,
        base_url: str = OPENWEATHER_BASE_URL,
        timeout: float = 10.0,
        max_retries: int = 2,
        retry_base_delay: float = 1.0,
        http: httpx.AsyncClient | None = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_retries = max_retries
        self.retry_base_delay = retry_base_delay
        self._http = http or httpx.AsyncClient(timeout=timeout)

    async def aclose(self) -> None:
        await self._http.aclose()

    async def get_current(self, city: str) -> dict:
        return await self._get("/weather", {"q": city_query(city)})

    async def get_current_by_coordinates(self, lat: float, lon: float) -> dict:
        return await self._get("/weather", {"lat": lat, "lon": lon})

    async def get_forecast(self, city: str) -> dict:
        """5-day forecast in 3-hour intervals."""
        return await self._get("/forecast", {"q": city_query(city)})

    async def get_forecast_by_coordinates(self, lat: float, lon: float) -> dict:
        return await self._get("/forecast", {"lat": lat, "lon": lon})

    async def validate_city(self, city: str) -> bool:
        """True when the source knows the city. Never raises."""
        try:
            resp = await self._http.get(
                f"{self.base_url}/weather",
                params={"q": city_query(city), "appid": self.api_key},
                timeout=self.timeout,
            )
            return resp.status_code == 200
        except (httpx.HTTPError, CityValidationError) as e:
            logger.error("City validation failed for %r: %s", city, e)
            return False

    async def _get(self, path: str, params: dict) -> dict:
        """GET with exponential backoff on 429/5xx and transport errors."""
        url = f"{self.base_url}{path}"
        query = {**params, "appid": self.api_key}

        for attempt in range(self.max_retries + 1):
            try:
                resp = await self._http.get(url, params=query, timeout=self.timeout)
            except httpx.RequestError as e:
                if attempt < self.max_retries:
                    delay = self.retry_base_delay * (2**attempt)
                    logger.warning(
                        "OpenWeather request error, retrying in %.1fs: %s", delay, e
                    )
                    await asyncio.sleep(delay)
                    continue
                raise WeatherFetchError(f"Request to {path} failed: {e}") from e

            if resp.status_code in RETRYABLE_STATUS and attempt < self.max_retries:
                delay = self.retry_base_delay * (2**attempt)
                logger.warning(
                    "OpenWeather %s returned %d, retrying in %.1fs (attempt %d/%d)",
                    path, resp.status_code, delay, attempt + 1, self.max_retries,
                )
                await asyncio.sleep(delay)
                continue

            if resp.status_code != 200:
                raise WeatherFetchError(
                    _error_message(resp, path), status_code=resp.status_code
                )
            try:
                return resp.json()
            except ValueError as e:
                raise WeatherFetchError(f"Invalid JSON from {path}: {e}") from e

        raise WeatherFetchError(f"Retries exhausted for {path}")


def _error_message(resp: httpx.Response, path: str) -> str:
    """Prefer the source's own `message` field."""
    try:
        body = resp.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return f"Failed to fetch {path} (HTTP {resp.status_code})"
