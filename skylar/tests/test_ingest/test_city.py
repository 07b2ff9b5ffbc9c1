"""Tests for city name parsing."""

import pytest

from skylar.errors import CityValidationError
from skylar.ingest.city import city_key, city_query, parse_city


class TestParseCity:
    def test_name_only(self):
        assert parse_city("Accra") == ("Accra", None)

    def test_name_and_country(self):
        assert parse_city(" Accra , gh ") == ("Accra", "GH")

    def test_three_letter_code(self):
        assert parse_city("Springfield, USA") == ("Springfield", "USA")

    @pytest.mark.parametrize("bad", ["", "   ", ", GH", "Accra, G", "Accra, G1", "A, B, C", "Accra,"])
    def test_rejects_malformed(self, bad: str):
        with pytest.raises(CityValidationError):
            parse_city(bad)


class TestQueryAndKey:
    def test_query(self):
        assert city_query("London, gb") == "London,GB"
        assert city_query("London") == "London"

    def test_key_is_case_insensitive(self):
        assert city_key("London, GB") == city_key("london,gb") == "london,gb"
