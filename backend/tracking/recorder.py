"""
Event recorder: builds standard ActivityEvents and appends them to the log.

Every record_* call is fire-and-forget from the caller's point of view:
it returns the stored event, or None when anything went wrong. Tracking is
supplementary telemetry and must never break navigation or gameplay.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from pydantic import ValidationError

import config
from models.event import ActivityEvent, Category
from models.user import CurrentUser
from tracking.activity_log import ActivityLog
from tracking.aggregation import format_duration_details
from tracking.errors import IdentityLookupError, TrackingError
from tracking.vocabulary import MEMORY_GAMES, SCREEN_TIME_PREFIX

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]

# Fields the recorder owns; extras may not overwrite them
_PROTECTED_FIELDS = ("id", "timestamp")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def precise_timestamp(now: datetime) -> dict[str, Any]:
    """Timezone-explicit projection of `now`, stored alongside navigation events."""
    local = now.astimezone()
    offset = local.utcoffset()
    return {
        "isoString": now.isoformat(),
        "localTime": local.isoformat(),
        # minutes behind UTC, same sign convention as the mobile client
        "timezoneOffset": -int(offset.total_seconds() // 60) if offset else 0,
        "timestamp": int(now.timestamp() * 1000),
    }


def _display_date(now: datetime) -> str:
    local = now.astimezone()
    return f"{local.month}/{local.day}/{local.year}"


def _display_time(now: datetime) -> str:
    local = now.astimezone()
    hour = local.hour % 12 or 12
    suffix = "PM" if local.hour >= 12 else "AM"
    return f"{hour}:{local.minute:02d}:{local.second:02d} {suffix}"


class EventRecorder:

    def __init__(
        self,
        log: ActivityLog,
        *,
        clock: Optional[Clock] = None,
        min_screen_time_seconds: int = config.MIN_SCREEN_TIME_SECONDS,
        user_key: str = config.USER_DATA_KEY,
    ):
        self.log = log
        self.clock = clock or utc_now
        self.min_screen_time_seconds = min_screen_time_seconds
        self.user_key = user_key
        self._last_id = 0

    # ---------- helpers ----------

    def _next_id(self, now: datetime) -> str:
        # Millisecond timestamp, bumped when two events land in the same ms
        candidate = int(now.timestamp() * 1000)
        if candidate <= self._last_id:
            candidate = self._last_id + 1
        self._last_id = candidate
        return str(candidate)

    async def _load_current_user(self) -> CurrentUser:
        """Raises IdentityLookupError when no usable user record is stored."""
        try:
            payload = await self.log.get_value(self.user_key)
        except TrackingError as exc:
            raise IdentityLookupError(f"user record unavailable: {exc}") from exc
        if not payload:
            raise IdentityLookupError("no user signed in")
        try:
            data = json.loads(payload)
        except json.JSONDecodeError as exc:
            raise IdentityLookupError(f"user record is not JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise IdentityLookupError("user record is not an object")
        try:
            return CurrentUser.model_validate(data)
        except ValidationError as exc:
            raise IdentityLookupError(f"user record has unexpected fields: {exc}") from exc

    async def current_user(self) -> Optional[CurrentUser]:
        """Best-effort lookup of the signed-in user; None when unknown."""
        try:
            return await self._load_current_user()
        except IdentityLookupError as exc:
            logger.debug("EventRecorder: recording without identity: %s", exc)
            return None

    # ---------- core ----------

    async def record(
        self,
        activity: str,
        category: str = Category.APP.value,
        details: Optional[Any] = None,
        extra: Optional[dict[str, Any]] = None,
    ) -> Optional[ActivityEvent]:
        """
        Append one activity to the shared log.

        `extra` is merged over the standard fields (last write wins) except
        for `id` and `timestamp`, which the recorder always owns.
        """
        return await self.record_as(await self.current_user(), activity, category, details, extra)

    async def record_as(
        self,
        user: Optional[CurrentUser],
        activity: str,
        category: str,
        details: Optional[Any],
        extra: Optional[dict[str, Any]],
    ) -> Optional[ActivityEvent]:
        """Like record(), for a user the caller has already looked up."""
        try:
            now = self.clock()

            fields: dict[str, Any] = {
                "id": self._next_id(now),
                "activity": activity,
                "category": category,
                "details": details,
                "timestamp": now,
                "date": _display_date(now),
                "time": _display_time(now),
            }
            if user is not None:
                fields["userEmail"] = user.email
                fields["userId"] = user.id

            for key, value in (extra or {}).items():
                if key in _PROTECTED_FIELDS:
                    logger.warning("EventRecorder: ignoring extra field %r on %r", key, activity)
                    continue
                fields[key] = value

            event = ActivityEvent.model_validate(fields)
        except Exception:
            logger.exception("EventRecorder: could not build event %r", activity)
            return None

        return await self.log.append(event)

    # ---------- convenience recorders ----------

    async def record_screen_time(
        self, screen_name: str, friendly_name: str, seconds: int
    ) -> Optional[ActivityEvent]:
        """Record dwell time on one screen; short visits are dropped."""
        if seconds < self.min_screen_time_seconds:
            return None

        now = self.clock()
        user = await self.current_user()
        extra: dict[str, Any] = {
            "rawTimeSeconds": seconds,
            "preciseTimestamp": precise_timestamp(now),
            "actualScreenTime": True,
            "screenName": screen_name,
        }
        if user is not None:
            extra["userName"] = user.name
            extra["userType"] = "patient"

        return await self.record_as(
            user,
            f"{SCREEN_TIME_PREFIX}{friendly_name}",
            Category.SCREEN_TIME.value,
            f"Spent {format_duration_details(seconds)} on {friendly_name}",
            extra,
        )

    async def record_game(
        self, game_name: str, action: str, result: Optional[Any] = None
    ) -> Optional[ActivityEvent]:
        category = Category.MEMORY_GAME if game_name in MEMORY_GAMES else Category.GAME
        details = f"Result: {result}" if result is not None else None
        return await self.record(f"{action} {game_name}", category.value, details)

    async def record_setting(self, setting: str, value: Any) -> Optional[ActivityEvent]:
        return await self.record(f"Changed {setting} to {value}", Category.SETTING.value)

    async def record_app_started(self) -> Optional[ActivityEvent]:
        return await self.record("App started", Category.SYSTEM.value)
