"""Tests for config loading, env overrides and get/set."""

from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from skylar.config.loader import (
    config_hash,
    get_config_value,
    load_config,
    redacted,
    save_config,
    set_config_value,
)
from skylar.config.schema import SkylarConfig
from skylar.models.common import Units


class TestLoadConfig:
    def test_load_from_yaml(self, config_yaml_path: Path):
        config = load_config(config_yaml_path)
        assert config.weather.api_key == "owm-test-key"
        assert config.service.service_retries == 0

    def test_missing_file_uses_defaults(self, tmp_path: Path):
        config = load_config(tmp_path / "missing.yaml")
        assert config.freshness.weather_minutes == 5
        assert config.weather.units == Units.METRIC

    def test_empty_yaml_uses_defaults(self, tmp_path: Path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_config(path) == SkylarConfig()

    def test_unknown_key_rejected(self, tmp_path: Path):
        path = tmp_path / "bad.yaml"
        with open(path, "w") as f:
            yaml.dump({"weather": {"colour": "blue"}}, f)
        with pytest.raises(ValidationError):
            load_config(path)

    def test_invalid_value_rejected(self, tmp_path: Path):
        path = tmp_path / "bad.yaml"
        with open(path, "w") as f:
            yaml.dump({"freshness": {"weather_minutes": 0}}, f)
        with pytest.raises(ValidationError):
            load_config(path)

    def test_env_overrides_file(self, config_yaml_path: Path, monkeypatch):
        monkeypatch.setenv("SKYLAR_OPENWEATHER_API_KEY", "from-env")
        monkeypatch.setenv("SKYLAR_GEMINI_API_KEY", "gem-env")
        config = load_config(config_yaml_path)
        assert config.weather.api_key == "from-env"
        assert config.ai.api_key == "gem-env"

    def test_env_ignored_when_disabled(self, config_yaml_path: Path, monkeypatch):
        monkeypatch.setenv("SKYLAR_OPENWEATHER_API_KEY", "from-env")
        assert load_config(config_yaml_path, apply_env=False).weather.api_key == "owm-test-key"

    def test_shipped_default_config(self):
        path = Path(__file__).resolve().parents[3] / "ops" / "configs" / "default.yaml"
        config = load_config(path)
        assert config.storage.db_path == "data/skylar.db"


class TestFreshnessWindows:
    def test_windows_in_seconds(self):
        windows = SkylarConfig().freshness.windows()
        assert windows == {
            "weather": 300,
            "aiSummary:short": 3600,
            "aiSummary:detail": 7200,
        }


class TestConfigHash:
    def test_deterministic(self):
        assert config_hash(SkylarConfig()) == config_hash(SkylarConfig())
        assert len(config_hash(SkylarConfig())) == 16

    def test_changes_with_config(self):
        other = set_config_value(SkylarConfig(), "service.hourly_slots", "4")
        assert config_hash(other) != config_hash(SkylarConfig())


class TestGetSet:
    def test_get_nested(self):
        assert get_config_value(SkylarConfig(), "freshness.weather_minutes") == 5

    def test_get_unknown(self):
        with pytest.raises(KeyError):
            get_config_value(SkylarConfig(), "freshness.nope")

    def test_set_coerces_types(self):
        config = SkylarConfig()
        config = set_config_value(config, "ai.enabled", "false")
        config = set_config_value(config, "service.service_retries", "5")
        config = set_config_value(config, "freshness.weather_minutes", "7.5")
        assert config.ai.enabled is False
        assert config.service.service_retries == 5
        assert config.freshness.weather_minutes == 7.5

    def test_set_enum(self):
        config = set_config_value(SkylarConfig(), "weather.units", "imperial")
        assert config.weather.units == Units.IMPERIAL

    def test_set_unknown_key(self):
        with pytest.raises(KeyError):
            set_config_value(SkylarConfig(), "weather.colour", "blue")

    def test_set_revalidates(self):
        with pytest.raises(ValidationError):
            set_config_value(SkylarConfig(), "service.hourly_slots", "0")


class TestRedactAndSave:
    def test_redacted(self, test_config: SkylarConfig):
        data = redacted(test_config)
        assert data["weather"]["api_key"] == "owm-..."
        assert data["ai"]["api_key"] == "gemi..."
        assert test_config.weather.api_key == "owm-test-key"

    def test_save_round_trip(self, tmp_path: Path, test_config: SkylarConfig):
        path = tmp_path / "out" / "config.yaml"
        save_config(test_config, path)
        assert load_config(path, apply_env=False) == test_config
