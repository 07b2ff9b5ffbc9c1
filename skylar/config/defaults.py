"""Default weather preferences per planned activity."""

from skylar.config.schema import ActivityPreference

DEFAULT_ACTIVITY_PREFERENCE = ActivityPreference(
    max_rain_chance=0.2, max_wind_speed=15, ideal_temp=22
)

ACTIVITY_PREFERENCES: dict[str, ActivityPreference] = {
    "Jogging": ActivityPreference(max_rain_chance=0.3, max_wind_speed=20, ideal_temp=18),
    "Picnic": ActivityPreference(max_rain_chance=0.1, max_wind_speed=15, ideal_temp=23),
    "Hiking": ActivityPreference(max_rain_chance=0.2, max_wind_speed=18, ideal_temp=20),
    "BBQ": ActivityPreference(max_rain_chance=0.1, max_wind_speed=10, ideal_temp=25),
    "Beach": ActivityPreference(max_rain_chance=0.1, max_wind_speed=12, ideal_temp=27),
    "Outdoor Party": ActivityPreference(max_rain_chance=0.2, max_wind_speed=15, ideal_temp=22),
    "Camping": ActivityPreference(max_rain_chance=0.3, max_wind_speed=15, ideal_temp=18),
    "Sports": ActivityPreference(max_rain_chance=0.2, max_wind_speed=15, ideal_temp=21),
}


def preference_for(activity: str) -> ActivityPreference:
    return ACTIVITY_PREFERENCES.get(activity, DEFAULT_ACTIVITY_PREFERENCE)
