"""City name parsing for "City, CountryCode" queries."""

import re

from skylar.errors import CityValidationError

_COUNTRY_CODE = re.compile(r"^[A-Za-z]{2,3}$")


def parse_city(city: str) -> tuple[str, str | None]:
    """Split "City, CC" into (city, country code). Rejects malformed input.

    Raises CityValidationError for empty names, an empty country part, a
    country part that is not a 2-3 letter code, or more than one comma.
    """
    if city is None or not city.strip():
        raise CityValidationError("City name must not be empty")

    parts = [p.strip() for p in city.split(",")]
    if len(parts) > 2:
        raise CityValidationError(f"Expected 'City, CountryCode', got {city!r}")

    name = parts[0]
    if not name:
        raise CityValidationError(f"Missing city name in {city!r}")

    if len(parts) == 1:
        return name, None

    country = parts[1]
    if not _COUNTRY_CODE.match(country):
        raise CityValidationError(f"Invalid country code in {city!r}")
    return name, country.upper()


def city_query(city: str) -> str:
    """Build the weather source's `q` parameter, e.g. "London,GB"."""
    name, country = parse_city(city)
    return f"{name},{country}" if country else name


def city_key(city: str) -> str:
    """Stable cache key for a city, case-insensitive."""
    return city_query(city).lower()
