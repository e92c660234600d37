import json
import math
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Category(str, Enum):
    """Categories the app itself emits. Any other string is still a valid category."""

    NAVIGATION = "Navigation"
    SETTING = "Setting"
    MEMORY_GAME = "Memory Game"
    GAME = "Game"
    EXERCISE = "Exercise"
    HEALTH = "Health"
    SCREEN_TIME = "ScreenTime"
    SYSTEM = "System"
    APP = "App"

    @classmethod
    def is_known(cls, value: str) -> bool:
        return value in cls._value2member_map_


class ActivityEvent(BaseModel):
    """
    One entry of the shared activity log.

    Field names are snake_case in Python and camelCase on the wire (the
    mobile client's storage format). Extra keys merged in by call sites
    (preciseTimestamp, directVisit, actualScreenTime, ...) are kept
    verbatim and exposed through `extra`.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str
    activity: str
    category: str
    timestamp: datetime
    details: Optional[Any] = None     # usually text, occasionally a structured note
    date: Optional[str] = None
    time: Optional[str] = None
    user_email: Optional[str] = Field(default=None, alias="userEmail")
    user_id: Optional[str] = Field(default=None, alias="userId")
    user_type: Optional[str] = Field(default=None, alias="userType")
    raw_time_seconds: Optional[int] = Field(default=None, alias="rawTimeSeconds")

    @field_validator("id", "user_id", mode="before")
    @classmethod
    def _stringify_ids(cls, value):
        # Older clients wrote numeric ids
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(int(value))
        return value

    @field_validator("raw_time_seconds", mode="before")
    @classmethod
    def _whole_seconds(cls, value):
        # Fractional seconds round half up; anything non-numeric counts as absent
        if isinstance(value, bool):
            return None
        if isinstance(value, str):
            try:
                value = float(value)
            except ValueError:
                return None
        if isinstance(value, float):
            return math.floor(value + 0.5) if math.isfinite(value) else None
        if isinstance(value, int):
            return value
        return None

    @field_validator("timestamp")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @property
    def details_text(self) -> str:
        if self.details is None:
            return ""
        if isinstance(self.details, str):
            return self.details
        return json.dumps(self.details, sort_keys=True)

    @property
    def extra(self) -> dict[str, Any]:
        return dict(self.model_extra or {})

    def to_storage(self) -> dict[str, Any]:
        """Wire shape: camelCase keys, ISO timestamp, unset optionals omitted."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
