"""Shared test fixtures."""

import json
from pathlib import Path

import pytest
import yaml

from skylar.config.schema import SkylarConfig
from skylar.forecast.aggregator import build_forecast_bundle
from skylar.ingest.mapping import parse_current, parse_samples
from skylar.models.weather import ForecastBundle
from skylar.tests.builders import GEMINI_FALLBACK, GEMINI_PRIMARY, OWM_BASE, FakeClock

FIXTURE_DIR = Path(__file__).parent / "fixtures"

TEST_CONFIG = {
    "weather": {
        "base_url": OWM_BASE,
        "api_key": "owm-test-key",
        "max_retries": 0,
        "retry_base_delay": 0.0,
    },
    "ai": {
        "api_key": "gemini-test-key",
        "primary_url": GEMINI_PRIMARY,
        "fallback_url": GEMINI_FALLBACK,
        "max_retries": 0,
        "retry_base_delay": 0.0,
    },
    "service": {"service_retries": 0, "service_retry_delay": 0.0},
}


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def current_json() -> dict:
    with open(FIXTURE_DIR / "owm_current_accra.json") as f:
        return json.load(f)


@pytest.fixture
def forecast_json() -> dict:
    with open(FIXTURE_DIR / "owm_forecast_accra.json") as f:
        return json.load(f)


@pytest.fixture
def accra_bundle(current_json: dict, forecast_json: dict) -> ForecastBundle:
    """Two-day Accra forecast. Day one has a Clouds/10d sample at noon."""
    return build_forecast_bundle(
        parse_current(current_json), parse_samples(forecast_json), tz=0
    )


@pytest.fixture
def test_config() -> SkylarConfig:
    return SkylarConfig(**TEST_CONFIG)


@pytest.fixture
def config_yaml_path(tmp_path: Path) -> Path:
    """Config YAML pointing at mocked endpoints, with a temp database."""
    data = dict(TEST_CONFIG)
    data["storage"] = {"db_path": str(tmp_path / "skylar.db")}
    path = tmp_path / "test_config.yaml"
    with open(path, "w") as f:
        yaml.dump(data, f)
    return path


@pytest.fixture(autouse=True)
def _no_env_keys(monkeypatch):
    for name in ("SKYLAR_OPENWEATHER_API_KEY", "SKYLAR_GEMINI_API_KEY", "SKYLAR_DB_PATH"):
        monkeypatch.delenv(name, raising=False)
