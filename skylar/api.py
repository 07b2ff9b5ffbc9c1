"""Skylar HTTP API: FastAPI backend consumed by the mobile client."""

import dataclasses
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from skylar import __version__
from skylar.ai.summaries import KINDS
from skylar.config.loader import load_config
from skylar.config.schema import SkylarConfig
from skylar.errors import CityValidationError, WeatherServiceError
from skylar.reporting.formatters import to_dict
from skylar.runtime import Runtime

CONFIG_ENV = "SKYLAR_CONFIG"
DEFAULT_CONFIG = "ops/configs/default.yaml"


class AskRequest(BaseModel):
    question: str = Field(min_length=1)
    city: str | None = None


class RefreshRequest(BaseModel):
    city: str


def create_app(config: SkylarConfig | None = None) -> FastAPI:
    if config is None:
        config = load_config(os.environ.get(CONFIG_ENV, DEFAULT_CONFIG))
    runtime = Runtime(config)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        await runtime.aclose()

    app = FastAPI(title="Skylar Weather API", version=__version__, lifespan=lifespan)
    app.state.runtime = runtime
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(CityValidationError)
    async def _invalid_city(request: Request, exc: CityValidationError):
        return JSONResponse(status_code=422, content={"detail": str(exc)})

    @app.exception_handler(WeatherServiceError)
    async def _service_failed(request: Request, exc: WeatherServiceError):
        cached = to_dict(exc.cached) if dataclasses.is_dataclass(exc.cached) else None
        return JSONResponse(
            status_code=502,
            content={"detail": str(exc), "attempts": exc.attempts, "cached": cached},
        )

    # ── Weather ────────────────────────────────────────────────

    def _missing_place() -> JSONResponse:
        return JSONResponse(
            status_code=422, content={"detail": "Provide a city or both lat and lon"}
        )

    @app.get("/api/weather")
    async def get_weather(
        city: str | None = None, lat: float | None = None, lon: float | None = None
    ):
        """Current conditions for a city or a device position."""
        if lat is not None and lon is not None:
            return to_dict(await runtime.weather.current_by_coordinates(lat, lon))
        if city is None:
            return _missing_place()
        return to_dict(await runtime.weather.current(city))

    @app.get("/api/forecast")
    async def get_forecast(
        city: str | None = None,
        lat: float | None = None,
        lon: float | None = None,
        force: bool = False,
    ):
        """Current conditions plus daily and hourly forecasts."""
        if lat is not None and lon is not None:
            bundle = await runtime.weather.forecast_by_coordinates(lat, lon, force=force)
        elif city is not None:
            bundle = await runtime.weather.forecast(city, force=force)
        else:
            return _missing_place()
        return to_dict(bundle)

    @app.get("/api/validate")
    async def validate_city(city: str):
        return {"city": city, "valid": await runtime.weather.validate_city(city)}

    @app.post("/api/refresh")
    async def refresh(body: RefreshRequest):
        return to_dict(await runtime.weather.refresh(body.city))

    @app.get("/api/freshness")
    def get_freshness():
        """Cache state of every data class seen so far."""
        return [
            {
                "data_class": s.data_class,
                "state": str(s.state),
                "age_seconds": s.age_seconds,
                "window_seconds": s.window_seconds,
                "in_flight": s.in_flight,
            }
            for s in runtime.gate.snapshot()
        ]

    # ── Assistant ──────────────────────────────────────────────

    @app.post("/api/ask")
    async def ask(body: AskRequest):
        bundle = None
        if body.city:
            try:
                bundle = await runtime.weather.forecast(body.city)
            except WeatherServiceError as e:
                bundle = e.cached
        reply = await runtime.assistant.ask(body.question, bundle, body.city)
        return {
            "text": reply.text,
            "is_weather_related": reply.is_weather_related,
            "fallback": reply.fallback,
        }

    @app.get("/api/summary")
    async def get_summary(city: str, kind: str = "short"):
        if kind not in KINDS:
            return JSONResponse(status_code=422, content={"detail": f"Unknown kind: {kind}"})
        bundle = await runtime.weather.forecast(city)
        summary = await runtime.summaries.summary(kind, bundle)
        return dataclasses.asdict(summary)

    return app
