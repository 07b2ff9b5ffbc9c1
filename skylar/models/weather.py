"""Weather data models: interval samples, day buckets and finished forecasts."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class WeatherCondition:
    category: str  # "Clear", "Clouds", "Rain", ...
    description: str
    icon_code: str  # e.g. "10d"
    condition_id: int = 0

    @property
    def icon_prefix(self) -> str:
        return self.icon_code[:2]


@dataclass(frozen=True)
class IntervalSample:
    """One 3-hour forecast point, temperatures already in the caller's unit."""

    timestamp: int
    temp: float
    temp_min: float
    temp_max: float
    feels_like: float
    humidity: int
    pressure: int
    wind_speed: float
    wind_direction: int
    clouds: int
    pop: float
    condition: WeatherCondition
    rain_3h: float | None = None


@dataclass(frozen=True)
class DayBucket:
    date: str  # YYYY-MM-DD, local to the forecast location
    samples: list[IntervalSample]


@dataclass(frozen=True)
class DailyForecast:
    date: str
    timestamp: int
    temp_day: float
    temp_min: float
    temp_max: float
    feels_like: float
    humidity: int
    pressure: int
    wind_speed: float
    wind_direction: int
    clouds: int
    pop: float
    condition: WeatherCondition
    rain: float | None = None
    condition_corrected: bool = False


@dataclass(frozen=True)
class HourlyForecast:
    timestamp: int
    temp: float
    feels_like: float
    humidity: int
    wind_speed: float
    wind_direction: int
    clouds: int
    pop: float
    condition: WeatherCondition
    rain: float | None = None


@dataclass(frozen=True)
class Coordinates:
    lat: float
    lon: float


@dataclass(frozen=True)
class CurrentWeather:
    location: str
    country: str
    temperature: float
    temp_min: float
    temp_max: float
    feels_like: float
    humidity: int
    pressure: int
    wind_speed: float
    wind_direction: int
    visibility: int
    sunrise: int
    sunset: int
    timezone: int  # offset from UTC in seconds
    coordinates: Coordinates
    condition: WeatherCondition

    @property
    def description(self) -> str:
        return self.condition.description

    @property
    def icon(self) -> str:
        return self.condition.icon_code


@dataclass(frozen=True)
class ForecastBundle:
    location: str
    country: str
    timezone: int
    current: CurrentWeather
    daily: list[DailyForecast] = field(default_factory=list)
    hourly: list[HourlyForecast] = field(default_factory=list)
    warning: str | None = None  # set when current succeeded but forecast failed
