"""CLI entry point for the Skylar weather assistant."""

import argparse
import asyncio
import json
import logging
from datetime import datetime

from skylar.config.loader import (
    get_config_value,
    load_config,
    redacted,
    save_config,
    set_config_value,
)
from skylar.errors import CityValidationError, PlanningError, WeatherServiceError
from skylar.models.planning import PlannedEvent
from skylar.reporting.formatters import (
    format_current_text,
    format_forecast_text,
    format_json,
)
from skylar.runtime import Runtime
from skylar.storage import profile_repo
from skylar.storage.database import open_store

DEFAULT_CONFIG = "ops/configs/default.yaml"


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="skylar",
        description="Skylar weather assistant",
    )
    parser.add_argument("--config", default=DEFAULT_CONFIG, help="Config YAML path")
    parser.add_argument("--db", default=None, help="SQLite DB path (overrides config)")

    sub = parser.add_subparsers(dest="command")

    current_p = sub.add_parser("current", help="Show current weather")
    current_p.add_argument("city", nargs="?", help="City, optionally 'City, CC'")
    current_p.add_argument("--json", action="store_true", help="Print JSON")

    forecast_p = sub.add_parser("forecast", help="Show current weather and forecast")
    forecast_p.add_argument("city", nargs="?", help="City, optionally 'City, CC'")
    forecast_p.add_argument("--json", action="store_true", help="Print JSON")
    forecast_p.add_argument("--summary", action="store_true", help="Add an AI summary")

    validate_p = sub.add_parser("validate", help="Check that a city is known")
    validate_p.add_argument("city")

    ask_p = sub.add_parser("ask", help="Ask the weather assistant a question")
    ask_p.add_argument("question")
    ask_p.add_argument("--city", help="City for weather context")

    plan_p = sub.add_parser("plan", help="Check the weather for a planned activity")
    plan_p.add_argument("activity")
    plan_p.add_argument("--when", required=True, help="Local time, 'YYYY-MM-DD HH:MM'")
    plan_p.add_argument("--city")
    plan_p.add_argument("--description", default="")
    plan_p.add_argument("--no-ai", action="store_true", help="Skip the AI recommendation")

    profile_p = sub.add_parser("profile", help="Stored profile operations")
    profile_sub = profile_p.add_subparsers(dest="profile_command")
    profile_sub.add_parser("show", help="Display stored profile data")
    loc_p = profile_sub.add_parser("set-location", help="Set the profile location")
    loc_p.add_argument("location")
    profile_sub.add_parser("clear", help="Reset all stored profile data")

    config_p = sub.add_parser("config", help="Config operations")
    config_sub = config_p.add_subparsers(dest="config_command")
    config_sub.add_parser("show", help="Display current config")
    set_p = config_sub.add_parser("set", help="Set a config value")
    set_p.add_argument("keyvalue", help="key=value to set")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = load_config(args.config)
    if args.db:
        config = config.model_copy(
            update={"storage": config.storage.model_copy(update={"db_path": args.db})}
        )

    if args.command == "current":
        return _cmd_current(config, args)
    elif args.command == "forecast":
        return _cmd_forecast(config, args)
    elif args.command == "validate":
        return _cmd_validate(config, args)
    elif args.command == "ask":
        return _cmd_ask(config, args)
    elif args.command == "plan":
        return _cmd_plan(config, args)
    elif args.command == "profile":
        return _cmd_profile(config, args)
    elif args.command == "config":
        return _cmd_config(config, args)
    else:
        parser.print_help()
        return 1


def _run(config, action) -> int:
    """Run an async action against a fresh Runtime, mapping domain errors to exit codes."""

    async def runner() -> int:
        runtime = Runtime(config)
        try:
            return await action(runtime)
        finally:
            await runtime.aclose()

    try:
        return asyncio.run(runner())
    except CityValidationError as e:
        print(f"Invalid city: {e}")
        return 2
    except WeatherServiceError as e:
        print(f"Error: {e}")
        return 1
    except PlanningError as e:
        print(f"Cannot plan: {e}")
        return 1


def _resolve_city(config, city: str | None) -> str:
    """Explicit argument, then the stored profile location, then the config default."""
    if city:
        return city
    conn = open_store(config.storage.db_path)
    try:
        location = profile_repo.load_profile(conn).location
    finally:
        conn.close()
    return location or config.default_city


def _cmd_current(config, args) -> int:
    city = _resolve_city(config, args.city)

    async def action(rt: Runtime) -> int:
        weather = await rt.weather.current(city)
        if args.json:
            print(format_json(weather))
        else:
            print(format_current_text(weather, config.weather.units))
        return 0

    return _run(config, action)


def _cmd_forecast(config, args) -> int:
    city = _resolve_city(config, args.city)

    async def action(rt: Runtime) -> int:
        bundle = await rt.weather.forecast(city)
        if args.json:
            print(format_json(bundle))
        else:
            print(format_forecast_text(bundle, config.weather.units))
        if args.summary:
            summary = await rt.summaries.short(bundle)
            print()
            print(summary.text)
        return 0

    return _run(config, action)


def _cmd_validate(config, args) -> int:
    async def action(rt: Runtime) -> int:
        ok = await rt.weather.validate_city(args.city)
        print(f"{args.city}: {'valid' if ok else 'not found'}")
        return 0 if ok else 1

    return _run(config, action)


def _cmd_ask(config, args) -> int:
    city = _resolve_city(config, args.city)

    async def action(rt: Runtime) -> int:
        bundle = None
        if city:
            try:
                bundle = await rt.weather.forecast(city)
            except WeatherServiceError as e:
                logging.getLogger(__name__).warning("Answering without weather data: %s", e)
                bundle = e.cached
        reply = await rt.assistant.ask(args.question, bundle, city or None)
        print(reply.text)
        return 0

    return _run(config, action)


def _cmd_plan(config, args) -> int:
    try:
        when = datetime.strptime(args.when, "%Y-%m-%d %H:%M")
    except ValueError:
        print("Error: --when must look like 'YYYY-MM-DD HH:MM'")
        return 1
    city = _resolve_city(config, args.city)

    async def action(rt: Runtime) -> int:
        bundle = await rt.weather.forecast(city)
        assistant = None if args.no_ai else rt.assistant
        assessment = await rt.planner.assess(
            bundle, args.activity, when, args.description, assistant
        )
        if args.description:
            rt.planner.add(PlannedEvent(
                activity=args.activity,
                description=args.description,
                starts_at=assessment.weather.requested_at,
            ))
        print(assessment.recommendation)
        if assessment.better_times:
            print("Recommended times:")
            for slot in assessment.better_times:
                print(f"  {slot}")
        return 0

    return _run(config, action)


def _cmd_profile(config, args) -> int:
    conn = open_store(config.storage.db_path)
    try:
        if args.profile_command == "show":
            print(json.dumps(profile_repo.load_all(conn), indent=2))
            return 0
        elif args.profile_command == "set-location":
            profile = profile_repo.set_location(conn, args.location)
            print(f"Location set to {profile.location}")
            return 0
        elif args.profile_command == "clear":
            profile_repo.clear_all(conn)
            print("Profile data cleared")
            return 0
        else:
            print("Use: profile show | profile set-location LOCATION | profile clear")
            return 1
    finally:
        conn.close()


def _cmd_config(config, args) -> int:
    if args.config_command == "show":
        print(json.dumps(redacted(config), indent=2))
        return 0
    elif args.config_command == "set":
        kv = args.keyvalue
        if "=" not in kv:
            print("Error: use key=value format")
            return 1
        key, value = kv.split("=", 1)
        try:
            file_config = load_config(args.config, apply_env=False)
            new_config = set_config_value(file_config, key.strip(), value.strip())
        except (KeyError, ValueError) as e:
            print(f"Error: {e}")
            return 1
        save_config(new_config, args.config)
        print(f"Set {key.strip()} = {get_config_value(new_config, key.strip())}")
        return 0
    else:
        print("Use: config show | config set key=value")
        return 1
