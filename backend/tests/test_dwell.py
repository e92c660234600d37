"""
Tests for the dwell tracker: visit events, ScreenTime thresholds, excluded
screens and background handling.
"""

import asyncio

from conftest import FakeClock, user_data
from tracking.activity_log import ActivityLog
from tracking.dwell import DwellTracker
from tracking.recorder import EventRecorder


class TestScreenVisits:

    def setup_method(self):
        self.clock = FakeClock()

    def _tracker(self, kv, **recorder_options) -> DwellTracker:
        recorder = EventRecorder(ActivityLog(kv), clock=self.clock, **recorder_options)
        return DwellTracker(recorder)

    def _screen_time(self, tracker):
        events = asyncio.run(tracker.recorder.log.read())
        return [e for e in events if e.category == "ScreenTime"]

    def _visit_then_leave(self, tracker, dwell_seconds):
        async def scenario():
            await tracker.on_screen_visit("Home")
            self.clock.advance(dwell_seconds)
            await tracker.on_screen_visit("Profile")

        asyncio.run(scenario())

    def test_visit_event_shape(self, kv):
        asyncio.run(kv.set("userData", user_data()))
        event = asyncio.run(self._tracker(kv).on_screen_visit("MemoryGames"))

        assert event.activity == "Visited Memory Games"
        assert event.category == "Navigation"
        assert event.details == "Screen: MemoryGames"
        assert event.user_email == "a@x.com"
        assert event.extra["directVisit"] is True
        assert event.extra["preciseTimestamp"]["timestamp"] == int(self.clock.now.timestamp() * 1000)

    def test_unknown_screen_uses_raw_name(self, kv):
        event = asyncio.run(self._tracker(kv).on_screen_visit("BreathingExercise"))
        assert event.activity == "Visited BreathingExercise"

    def test_one_second_dwell_not_recorded(self, kv):
        tracker = self._tracker(kv)
        self._visit_then_leave(tracker, 1)
        assert self._screen_time(tracker) == []

    def test_two_second_dwell_below_default_floor(self, kv):
        tracker = self._tracker(kv)
        self._visit_then_leave(tracker, 2)
        assert self._screen_time(tracker) == []

    def test_two_second_dwell_recorded_with_lower_floor(self, kv):
        tracker = self._tracker(kv, min_screen_time_seconds=2)
        self._visit_then_leave(tracker, 2)
        assert [e.raw_time_seconds for e in self._screen_time(tracker)] == [2]

    def test_dwell_recorded_for_previous_screen(self, kv):
        tracker = self._tracker(kv)
        self._visit_then_leave(tracker, 45)

        samples = self._screen_time(tracker)
        assert len(samples) == 1
        assert samples[0].activity == "Time on Home Screen"
        assert samples[0].raw_time_seconds == 45

    def test_dwell_rounds_to_nearest_second(self, kv):
        tracker = self._tracker(kv)
        self._visit_then_leave(tracker, 9.5)
        assert self._screen_time(tracker)[0].raw_time_seconds == 10

    def test_log_order_sample_then_visit(self, kv):
        tracker = self._tracker(kv)
        self._visit_then_leave(tracker, 30)

        events = asyncio.run(tracker.recorder.log.read())
        assert [e.activity for e in events] == [
            "Visited Profile",
            "Time on Home Screen",
            "Visited Home Screen",
        ]

    def test_revisiting_same_screen_restarts_timer(self, kv):
        tracker = self._tracker(kv)

        async def scenario():
            await tracker.on_screen_visit("Home")
            self.clock.advance(30)
            await tracker.on_screen_visit("Home")
            self.clock.advance(10)
            await tracker.on_screen_visit("Profile")

        asyncio.run(scenario())
        # no sample on the revisit; the later departure counts from the second visit
        assert [e.raw_time_seconds for e in self._screen_time(tracker)] == [10]

    def test_excluded_screen_not_recorded(self, kv):
        tracker = self._tracker(kv)
        assert asyncio.run(tracker.on_screen_visit("Login")) is None
        assert asyncio.run(tracker.recorder.log.read()) == []
        assert tracker.current_screen == "Login"

    def test_no_dwell_for_excluded_screen(self, kv):
        tracker = self._tracker(kv)

        async def scenario():
            await tracker.on_screen_visit("Welcome")
            self.clock.advance(60)
            await tracker.on_screen_visit("Home")

        asyncio.run(scenario())
        assert self._screen_time(tracker) == []


class TestAppState:

    def setup_method(self):
        self.clock = FakeClock()

    def _tracker(self, kv) -> DwellTracker:
        return DwellTracker(EventRecorder(ActivityLog(kv), clock=self.clock))

    def test_background_flushes_current_screen(self, kv):
        tracker = self._tracker(kv)

        async def scenario():
            await tracker.on_screen_visit("Home")
            self.clock.advance(20)
            return await tracker.on_app_state_change("background")

        event = asyncio.run(scenario())
        assert event.activity == "Time on Home Screen"
        assert event.raw_time_seconds == 20
        assert tracker.is_in_background

    def test_inactive_counts_as_background(self, kv):
        tracker = self._tracker(kv)

        async def scenario():
            await tracker.on_screen_visit("Home")
            self.clock.advance(20)
            await tracker.on_app_state_change("inactive")
            self.clock.advance(20)
            return await tracker.on_app_state_change("background")

        assert asyncio.run(scenario()) is None  # second transition flushes nothing
        assert tracker.is_in_background

    def test_visits_while_backgrounded_never_logged(self, kv):
        tracker = self._tracker(kv)

        async def scenario():
            await tracker.on_screen_visit("Home")
            await tracker.on_app_state_change("background")
            return await tracker.on_screen_visit("Profile")

        assert asyncio.run(scenario()) is None
        activities = [e.activity for e in asyncio.run(tracker.recorder.log.read())]
        assert "Visited Profile" not in activities
        assert tracker.current_screen == "Home"

    def test_background_time_not_counted(self, kv):
        tracker = self._tracker(kv)

        async def scenario():
            await tracker.on_screen_visit("Home")
            self.clock.advance(10)
            await tracker.on_app_state_change("background")
            self.clock.advance(3600)
            await tracker.on_app_state_change("active")
            self.clock.advance(15)
            await tracker.on_screen_visit("Profile")

        asyncio.run(scenario())
        samples = [e for e in asyncio.run(tracker.recorder.log.read()) if e.category == "ScreenTime"]
        assert [e.raw_time_seconds for e in samples] == [15, 10]

    def test_background_without_screen(self, kv):
        tracker = self._tracker(kv)
        assert asyncio.run(tracker.on_app_state_change("background")) is None
        assert tracker.is_in_background

    def test_unknown_state_ignored(self, kv):
        tracker = self._tracker(kv)
        assert asyncio.run(tracker.on_app_state_change("suspended")) is None
        assert not tracker.is_in_background
