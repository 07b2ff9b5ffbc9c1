"""Tests for CLI commands."""

import json
from pathlib import Path

import httpx
import respx
import yaml

from skylar.cli import main
from skylar.tests.builders import GEMINI_PRIMARY, OWM_BASE

WEATHER_URL = f"{OWM_BASE}/weather"
FORECAST_URL = f"{OWM_BASE}/forecast"


def gemini_reply(text: str) -> dict:
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


class TestCLI:
    def test_no_command_returns_1(self, capsys):
        assert main([]) == 1

    def test_config_show_redacts_keys(self, config_yaml_path: Path, capsys):
        assert main(["--config", str(config_yaml_path), "config", "show"]) == 0
        out = capsys.readouterr().out
        assert "owm-..." in out
        assert "owm-test-key" not in out

    def test_config_set_writes_file(self, config_yaml_path: Path, capsys):
        result = main([
            "--config", str(config_yaml_path), "config", "set", "freshness.weather_minutes=10",
        ])
        assert result == 0
        assert "10.0" in capsys.readouterr().out
        with open(config_yaml_path) as f:
            assert yaml.safe_load(f)["freshness"]["weather_minutes"] == 10.0

    def test_config_set_unknown_key(self, config_yaml_path: Path, capsys):
        result = main(["--config", str(config_yaml_path), "config", "set", "nope.key=1"])
        assert result == 1
        assert "Error" in capsys.readouterr().out

    def test_config_set_needs_equals(self, config_yaml_path: Path, capsys):
        assert main(["--config", str(config_yaml_path), "config", "set", "nope"]) == 1


class TestProfileCommands:
    def test_set_location_show_clear(self, config_yaml_path: Path, tmp_path: Path, capsys):
        db = str(tmp_path / "profile.db")
        base = ["--config", str(config_yaml_path), "--db", db, "profile"]

        assert main(base + ["set-location", "Accra, GH"]) == 0
        assert "Accra, GH" in capsys.readouterr().out

        assert main(base + ["show"]) == 0
        shown = json.loads(capsys.readouterr().out)
        assert shown["profile"]["location"] == "Accra, GH"

        assert main(base + ["clear"]) == 0
        capsys.readouterr()
        main(base + ["show"])
        shown = json.loads(capsys.readouterr().out)
        assert shown["profile"]["location"] == ""
        assert shown["dailyRoutine"]["commuteTime"] == {"hours": 8, "minutes": 0, "isAM": True}


class TestWeatherCommands:
    @respx.mock
    def test_current(self, config_yaml_path: Path, current_json: dict, capsys):
        respx.get(WEATHER_URL).mock(return_value=httpx.Response(200, json=current_json))
        assert main(["--config", str(config_yaml_path), "current", "Accra"]) == 0
        out = capsys.readouterr().out
        assert "Accra, GH" in out
        assert "25.0°C" in out

    @respx.mock
    def test_forecast_json(self, config_yaml_path: Path, current_json, forecast_json, capsys):
        respx.get(WEATHER_URL).mock(return_value=httpx.Response(200, json=current_json))
        respx.get(FORECAST_URL).mock(return_value=httpx.Response(200, json=forecast_json))
        assert main(["--config", str(config_yaml_path), "forecast", "Accra", "--json"]) == 0
        data = json.loads(capsys.readouterr().out)
        assert data["daily"][0]["condition"]["icon_code"] == "04d"

    @respx.mock
    def test_forecast_uses_profile_location(
        self, config_yaml_path: Path, current_json, forecast_json, capsys
    ):
        route = respx.get(WEATHER_URL).mock(return_value=httpx.Response(200, json=current_json))
        respx.get(FORECAST_URL).mock(return_value=httpx.Response(200, json=forecast_json))
        main(["--config", str(config_yaml_path), "profile", "set-location", "Accra, GH"])

        assert main(["--config", str(config_yaml_path), "forecast"]) == 0
        assert route.calls[0].request.url.params["q"] == "Accra,GH"
        assert "Daily:" in capsys.readouterr().out

    def test_invalid_city(self, config_yaml_path: Path, capsys):
        assert main(["--config", str(config_yaml_path), "current", "Accra, G1"]) == 2
        assert "Invalid city" in capsys.readouterr().out

    @respx.mock
    def test_upstream_failure(self, config_yaml_path: Path, capsys):
        respx.get(WEATHER_URL).mock(return_value=httpx.Response(500))
        assert main(["--config", str(config_yaml_path), "current", "Accra"]) == 1
        assert "Failed to fetch weather" in capsys.readouterr().out

    @respx.mock
    def test_validate_not_found(self, config_yaml_path: Path, capsys):
        respx.get(WEATHER_URL).mock(return_value=httpx.Response(404))
        assert main(["--config", str(config_yaml_path), "validate", "Atlantis"]) == 1
        assert "not found" in capsys.readouterr().out


class TestAssistantCommands:
    @respx.mock
    def test_ask(self, config_yaml_path: Path, current_json, forecast_json, capsys):
        respx.get(WEATHER_URL).mock(return_value=httpx.Response(200, json=current_json))
        respx.get(FORECAST_URL).mock(return_value=httpx.Response(200, json=forecast_json))
        respx.post(GEMINI_PRIMARY).mock(
            return_value=httpx.Response(200, json=gemini_reply("Light rain early, then clouds."))
        )
        result = main(["--config", str(config_yaml_path), "ask", "Will it rain?", "--city", "Accra"])
        assert result == 0
        assert "Light rain early, then clouds." in capsys.readouterr().out

    @respx.mock
    def test_plan_static(self, config_yaml_path: Path, current_json, forecast_json, capsys):
        respx.get(WEATHER_URL).mock(return_value=httpx.Response(200, json=current_json))
        respx.get(FORECAST_URL).mock(return_value=httpx.Response(200, json=forecast_json))
        result = main([
            "--config", str(config_yaml_path), "plan", "Beach",
            "--when", "2024-06-14 12:00", "--city", "Accra", "--no-ai",
        ])
        assert result == 0
        out = capsys.readouterr().out
        assert "Beach conditions look good" in out
        assert "Fri, Jun 14, 6:00 PM" in out

    def test_plan_bad_time(self, config_yaml_path: Path, capsys):
        result = main([
            "--config", str(config_yaml_path), "plan", "Beach", "--when", "tomorrow", "--city", "Accra",
        ])
        assert result == 1
