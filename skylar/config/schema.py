"""Pydantic v2 configuration schema with strict validation."""

from pydantic import BaseModel, Field

from skylar.models.common import Units

OPENWEATHER_BASE_URL = "https://api.openweathermap.org/data/2.5"
GEMINI_PRIMARY_URL = (
    "https://generativelanguage.googleapis.com/v1/models/gemini-1.5-pro:generateContent"
)
GEMINI_FALLBACK_URL = (
    "https://generativelanguage.googleapis.com/v1beta/models/gemini-pro:generateContent"
)


class WeatherSourceConfig(BaseModel):
    model_config = {"extra": "forbid"}

    base_url: str = OPENWEATHER_BASE_URL
    api_key: str = ""
    units: Units = Units.METRIC
    timeout_seconds: float = Field(default=10.0, gt=0.0)
    max_retries: int = Field(default=2, ge=0)
    retry_base_delay: float = Field(default=1.0, ge=0.0)


class AiConfig(BaseModel):
    model_config = {"extra": "forbid"}

    enabled: bool = True
    api_key: str = ""
    primary_url: str = GEMINI_PRIMARY_URL
    fallback_url: str = GEMINI_FALLBACK_URL
    generate_timeout_seconds: float = Field(default=10.0, gt=0.0)
    classify_timeout_seconds: float = Field(default=5.0, gt=0.0)
    max_retries: int = Field(default=2, ge=0)
    retry_base_delay: float = Field(default=1.0, ge=0.0)
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    max_output_tokens: int = Field(default=100, ge=1)


class FreshnessConfig(BaseModel):
    model_config = {"extra": "forbid"}

    weather_minutes: float = Field(default=5.0, gt=0.0)
    ai_summary_short_minutes: float = Field(default=60.0, gt=0.0)
    ai_summary_detail_minutes: float = Field(default=120.0, gt=0.0)
    fetch_timeout_seconds: float = Field(default=30.0, gt=0.0)

    def windows(self) -> dict[str, float]:
        """Window in seconds per data-class key."""
        return {
            "weather": self.weather_minutes * 60,
            "aiSummary:short": self.ai_summary_short_minutes * 60,
            "aiSummary:detail": self.ai_summary_detail_minutes * 60,
        }


class ServiceConfig(BaseModel):
    model_config = {"extra": "forbid"}

    service_retries: int = Field(default=2, ge=0)
    service_retry_delay: float = Field(default=2.0, ge=0.0)
    hourly_slots: int = Field(default=8, ge=1, le=40)


class StorageConfig(BaseModel):
    model_config = {"extra": "forbid"}

    db_path: str = "data/skylar.db"


class SkylarConfig(BaseModel):
    model_config = {"extra": "forbid"}

    weather: WeatherSourceConfig = WeatherSourceConfig()
    ai: AiConfig = AiConfig()
    freshness: FreshnessConfig = FreshnessConfig()
    service: ServiceConfig = ServiceConfig()
    storage: StorageConfig = StorageConfig()
    default_city: str = ""


class ActivityPreference(BaseModel):
    model_config = {"extra": "forbid", "frozen": True}

    max_rain_chance: float = Field(ge=0.0, le=1.0)
    max_wind_speed: float = Field(ge=0.0)
    ideal_temp: float
