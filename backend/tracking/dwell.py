"""
Screen-dwell tracking.

DwellTracker turns navigation and app-lifecycle transitions into events:
  on_screen_visit(name)        → ScreenTime for the screen being left
                                  (dwell > 1s), then "Visited <name>"
  on_app_state_change(state)   → backgrounding flushes the current screen's
                                  dwell; returning to the foreground restarts
                                  the dwell clock

Auth / landing screens are never tracked, and nothing is recorded while the
app is in the background. One instance per app session; its state is
guarded by an asyncio.Lock so transitions apply one at a time.
"""

import asyncio
import logging
import math
from datetime import datetime
from typing import Optional

from models.event import ActivityEvent, Category
from tracking.recorder import Clock, EventRecorder, precise_timestamp, utc_now
from tracking.vocabulary import EXCLUDED_SCREENS, SCREEN_DETAILS_PREFIX, friendly_screen_name

logger = logging.getLogger(__name__)

# Dwell must exceed this before a ScreenTime sample is attempted
MIN_DWELL_SECONDS = 1

BACKGROUND_STATES = ("background", "inactive")
ACTIVE_STATE = "active"


class DwellTracker:

    def __init__(
        self,
        recorder: EventRecorder,
        *,
        clock: Optional[Clock] = None,
        excluded_screens: frozenset = EXCLUDED_SCREENS,
    ):
        self.recorder = recorder
        self.clock = clock or recorder.clock or utc_now
        self.excluded_screens = excluded_screens

        self.current_screen: Optional[str] = None
        self.screen_entry_time: Optional[datetime] = None
        self.is_in_background = False
        self._lock = asyncio.Lock()

    def _dwell_seconds(self, now: datetime) -> int:
        elapsed = (now - self.screen_entry_time).total_seconds()
        return math.floor(elapsed + 0.5)

    async def _flush_current(self, now: datetime) -> Optional[ActivityEvent]:
        """Record dwell time for the current screen, if it qualifies."""
        screen = self.current_screen
        if not screen or self.screen_entry_time is None or screen in self.excluded_screens:
            return None
        seconds = self._dwell_seconds(now)
        if seconds <= MIN_DWELL_SECONDS:
            return None
        return await self.recorder.record_screen_time(screen, friendly_screen_name(screen), seconds)

    async def on_screen_visit(self, screen_name: str) -> Optional[ActivityEvent]:
        """
        Handle navigation to `screen_name`.

        Returns the "Visited ..." event, or None when the visit was not
        recorded (background, excluded screen, or a tracking failure).
        """
        async with self._lock:
            try:
                if self.is_in_background:
                    return None

                now = self.clock()
                if self.current_screen != screen_name:
                    await self._flush_current(now)

                self.current_screen = screen_name
                self.screen_entry_time = now

                if screen_name in self.excluded_screens:
                    return None

                extra = {"preciseTimestamp": precise_timestamp(now), "directVisit": True}
                user = await self.recorder.current_user()
                if user is not None:
                    extra["userName"] = user.name

                return await self.recorder.record_as(
                    user,
                    f"Visited {friendly_screen_name(screen_name)}",
                    Category.NAVIGATION.value,
                    f"{SCREEN_DETAILS_PREFIX} {screen_name}",
                    extra,
                )
            except Exception:
                logger.exception("DwellTracker: failed to track visit to %r", screen_name)
                return None

    async def on_app_state_change(self, next_state: str) -> Optional[ActivityEvent]:
        """
        Handle an app lifecycle transition.

        Returns the flushed ScreenTime event when backgrounding produced one.
        """
        async with self._lock:
            try:
                if next_state in BACKGROUND_STATES:
                    if self.is_in_background:
                        return None
                    event = await self._flush_current(self.clock())
                    self.is_in_background = True
                    return event

                if next_state == ACTIVE_STATE:
                    self.is_in_background = False
                    self.screen_entry_time = self.clock()
                    return None

                logger.warning("DwellTracker: ignoring unknown app state %r", next_state)
                return None
            except Exception:
                logger.exception("DwellTracker: failed to handle app state %r", next_state)
                return None
