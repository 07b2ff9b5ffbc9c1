"""User profile, daily routine and preferences kept in the local store.

Stored JSON uses camelCase keys so records written by the mobile client
load unchanged.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _StoredModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class UserProfile(_StoredModel):
    age: str = ""
    gender: str = ""
    occupation: str = ""
    location: str = ""


class CommuteTime(_StoredModel):
    hours: int = Field(default=8, ge=1, le=12)
    minutes: int = Field(default=0, ge=0, le=59)
    is_am: bool = Field(default=True, alias="isAM")

    def label(self) -> str:
        return f"{self.hours:02d}:{self.minutes:02d} {'AM' if self.is_am else 'PM'}"


class DailyRoutine(_StoredModel):
    morning_activity: str | None = None
    commute_method: str | None = None
    commute_time: CommuteTime = CommuteTime()
    evening_activity: str | None = None
    selected_activity: str | None = None


class Preferences(_StoredModel):
    style: str | None = None
    health_concerns: list[str] = []
    activities: list[str] = []
