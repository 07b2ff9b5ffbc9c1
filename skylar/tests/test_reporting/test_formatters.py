"""Tests for text and JSON output formatters."""

import json

from skylar.models.common import Units
from skylar.reporting.formatters import (
    format_current_text,
    format_forecast_text,
    format_json,
    icon_glyph,
    icon_name,
)
from skylar.tests.builders import make_current


class TestIcons:
    def test_names(self):
        assert icon_name("01d") == "weather-sunny"
        assert icon_name("01n") == "weather-night"
        assert icon_name("10n") == "weather-rainy"
        assert icon_name("??") == "weather-cloudy"

    def test_glyphs(self):
        assert icon_glyph("01d") == "☀"
        assert icon_glyph("01n") == "☾"
        assert icon_glyph("11d") == "⛈"
        assert icon_glyph("") == "☁"


class TestText:
    def test_current(self):
        text = format_current_text(make_current())
        assert text.splitlines()[0] == "=== Accra, GH ==="
        assert "25.0°C" in text
        assert "3.5 m/s" in text

    def test_current_imperial_labels(self):
        assert "mph" in format_current_text(make_current(), Units.IMPERIAL)

    def test_forecast(self, accra_bundle):
        text = format_forecast_text(accra_bundle)
        assert "Next hours:" in text
        assert "  00:00 🌦 20.0°C light rain (80% rain)" in text
        assert "Fri 14 Jun" in text
        assert "broken clouds *" in text

    def test_warning_shown(self, accra_bundle):
        from dataclasses import replace

        partial = replace(accra_bundle, daily=[], hourly=[], warning="Forecast data unavailable: boom")
        text = format_forecast_text(partial)
        assert "WARNING: Forecast data unavailable: boom" in text
        assert "Daily:" not in text


class TestJson:
    def test_icon_names_added(self, accra_bundle):
        data = json.loads(format_json(accra_bundle))
        assert data["current"]["condition"]["icon_name"] == "weather-cloudy"
        assert data["daily"][0]["condition"]["icon_name"] == "weather-cloudy"
        assert data["hourly"][0]["condition"]["icon_name"] == "weather-rainy"
