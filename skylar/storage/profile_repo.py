"""Repository for the user's profile, routine, preferences and onboarding flag."""

import json
import logging
import sqlite3

from pydantic import ValidationError

from skylar.models.profile import DailyRoutine, Preferences, UserProfile
from skylar.storage.kv_repo import get_value, set_value

logger = logging.getLogger(__name__)

USER_PROFILE_KEY = "skylar_user_profile"
DAILY_ROUTINE_KEY = "skylar_daily_routine"
PREFERENCES_KEY = "skylar_preferences"
ONBOARDING_KEY = "skylar_has_completed_onboarding"


def _load(conn: sqlite3.Connection, key: str, model: type):
    try:
        raw = get_value(conn, key)
        if raw is None:
            return model()
        return model.model_validate(raw)
    except (json.JSONDecodeError, ValidationError):
        logger.warning("Stored %s is invalid, using defaults", key)
        return model()


def _save(conn: sqlite3.Connection, key: str, value) -> None:
    set_value(conn, key, value.model_dump(by_alias=True))


# --- Profile ---

def load_profile(conn: sqlite3.Connection) -> UserProfile:
    return _load(conn, USER_PROFILE_KEY, UserProfile)


def save_profile(conn: sqlite3.Connection, profile: UserProfile) -> None:
    _save(conn, USER_PROFILE_KEY, profile)


def set_location(conn: sqlite3.Connection, location: str) -> UserProfile:
    profile = load_profile(conn).model_copy(update={"location": location.strip()})
    save_profile(conn, profile)
    return profile


# --- Routine ---

def load_routine(conn: sqlite3.Connection) -> DailyRoutine:
    return _load(conn, DAILY_ROUTINE_KEY, DailyRoutine)


def save_routine(conn: sqlite3.Connection, routine: DailyRoutine) -> None:
    _save(conn, DAILY_ROUTINE_KEY, routine)


# --- Preferences ---

def load_preferences(conn: sqlite3.Connection) -> Preferences:
    return _load(conn, PREFERENCES_KEY, Preferences)


def save_preferences(conn: sqlite3.Connection, preferences: Preferences) -> None:
    _save(conn, PREFERENCES_KEY, preferences)


# --- Onboarding ---

def has_completed_onboarding(conn: sqlite3.Connection) -> bool:
    try:
        return get_value(conn, ONBOARDING_KEY) is True
    except json.JSONDecodeError:
        logger.warning("Stored %s is invalid, treating as not completed", ONBOARDING_KEY)
        return False


def set_onboarding_complete(conn: sqlite3.Connection, complete: bool) -> None:
    set_value(conn, ONBOARDING_KEY, complete)


def load_all(conn: sqlite3.Connection) -> dict:
    return {
        "profile": load_profile(conn).model_dump(by_alias=True),
        "dailyRoutine": load_routine(conn).model_dump(by_alias=True),
        "preferences": load_preferences(conn).model_dump(by_alias=True),
        "hasCompletedOnboarding": has_completed_onboarding(conn),
    }


def clear_all(conn: sqlite3.Connection) -> None:
    """Reset every record to its default. The onboarding flag is cleared too."""
    save_profile(conn, UserProfile())
    save_routine(conn, DailyRoutine())
    save_preferences(conn, Preferences())
    set_onboarding_complete(conn, False)
    logger.info("Cleared stored user data")
