"""Domain errors raised at the service boundary."""

from typing import Any


class SkylarError(Exception):
    """Base class for all Skylar domain errors."""


class CityValidationError(SkylarError):
    """City name is empty or malformed. Raised before any network access."""


class WeatherFetchError(SkylarError):
    """Transport failure or non-2xx response from the weather source."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class WeatherServiceError(SkylarError):
    """Weather data could not be obtained after service-level retries."""

    def __init__(self, message: str, attempts: int = 1, cached: Any = None):
        super().__init__(message)
        self.attempts = attempts
        self.cached = cached


class FetchError(SkylarError):
    """A gated fetch failed. `cached` holds the last-known-good payload, if any."""

    def __init__(self, data_class: str, cause: BaseException, cached: Any = None):
        super().__init__(f"Fetch for {data_class} failed: {cause}")
        self.data_class = data_class
        self.cause = cause
        self.cached = cached


class AiGenerationError(SkylarError):
    """The text-generation endpoint returned no usable text.

    `reason` is one of: missing_key, auth, timeout, network, server, http, empty.
    """

    def __init__(self, message: str, reason: str = "http"):
        super().__init__(message)
        self.reason = reason


class PlanningError(SkylarError):
    """An event could not be planned (missing fields or time conflict)."""
