"""
HTTP surface tests. Every test runs against a fresh in-memory store and a
fake clock, so nothing touches disk.
"""

import asyncio
import json

from fastapi.testclient import TestClient

import store
from conftest import T0, FakeClock, make_event, user_data
from main import app
from storage.memory import InMemoryStore


class TestActivityRoutes:

    def setup_method(self):
        self.kv = InMemoryStore()
        self.clock = FakeClock()
        store.reset(self.kv, clock=self.clock)
        self.client = TestClient(app)

    def test_health(self):
        assert self.client.get("/").json()["status"] == "ok"

    def test_startup_records_app_started(self):
        with TestClient(app) as client:
            events = client.get("/activity").json()
        assert [(e["activity"], e["category"]) for e in events] == [("App started", "System")]

    def test_record_and_list(self):
        resp = self.client.post("/activity", json={
            "activity": "Opened reminders",
            "category": "App",
            "extra": {"source": "widget"},
        })
        body = resp.json()
        assert resp.status_code == 200
        assert body["recorded"] is True
        assert body["event"]["source"] == "widget"

        events = self.client.get("/activity").json()
        assert [e["activity"] for e in events] == ["Opened reminders"]

    def test_record_game_and_game_tab(self):
        self.client.post("/activity/game", json={"game_name": "Word Memory Game", "action": "Completed"})
        self.client.post("/activity/setting", json={"setting": "Reminders", "value": "enabled"})

        games = self.client.get("/activity", params={"view": "Game"}).json()
        assert [(e["activity"], e["category"]) for e in games] == [
            ("Completed Word Memory Game", "Memory Game"),
        ]

    def test_record_failure_is_not_an_http_error(self):
        asyncio.run(self.kv.set("activityHistory", "{corrupted"))
        resp = self.client.post("/activity", json={"activity": "Opened reminders"})
        assert resp.status_code == 200
        assert resp.json() == {"recorded": False, "event": None}

    def test_user_history(self):
        asyncio.run(self.kv.set("activityHistory", json.dumps([
            make_event(id="3", userEmail="a@x.com", category="Memory Game", activity="Completed Puzzle Challenge"),
            make_event(id="2", userEmail="b@x.com", details="Screen: Home"),
            make_event(id="1", userId="u1", activity="Caregiver note"),
        ])))
        user = {"id": "u1", "email": "a@x.com", "lastLogin": T0.isoformat()}

        resp = self.client.post("/activity/history", json={"user": user})
        assert [e["id"] for e in resp.json()] == ["3"]

    def test_user_history_without_user_returns_all(self):
        asyncio.run(self.kv.set("activityHistory", json.dumps([make_event(id="2"), make_event(id="1")])))
        resp = self.client.post("/activity/history", json={})
        assert [e["id"] for e in resp.json()] == ["2", "1"]

    def test_patient_history(self):
        asyncio.run(self.kv.set("activityHistory", json.dumps([
            make_event(id="2", activity="Caregiver viewed map", userEmail="p@x.com"),
            make_event(id="1", details="Screen: Home"),
        ])))
        resp = self.client.get("/activity/patient/p@x.com")
        assert [e["id"] for e in resp.json()] == ["1"]

    def test_clear(self):
        self.client.post("/activity", json={"activity": "Opened reminders"})
        assert self.client.delete("/activity").json() == {"cleared": True}
        assert self.client.delete("/activity").json() == {"cleared": True}
        assert self.client.get("/activity").json() == []


class TestScreenRoutes:

    def setup_method(self):
        self.kv = InMemoryStore()
        self.clock = FakeClock()
        store.reset(self.kv, clock=self.clock)
        asyncio.run(self.kv.set("userData", user_data(email="p@x.com")))
        self.client = TestClient(app)

    def test_visits_produce_screen_time_report(self):
        self.client.post("/screens/visit", json={"screen_name": "Home"})
        self.clock.advance(125)
        resp = self.client.post("/screens/visit", json={"screen_name": "Profile"})
        assert resp.json()["event"]["activity"] == "Visited Profile"

        report = self.client.get("/screen-time").json()
        assert report["screens"]["Home Screen"]["total_time_seconds"] == 125
        assert report["screens"]["Home Screen"]["total_time_formatted"] == "2 minutes 5 seconds"
        assert report["total_time_formatted"] == "2 minutes 5 seconds"

    def test_auth_screen_not_recorded(self):
        resp = self.client.post("/screens/visit", json={"screen_name": "Login"})
        assert resp.json()["recorded"] is False

    def test_background_flush_and_suppression(self):
        self.client.post("/screens/visit", json={"screen_name": "Home"})
        self.clock.advance(30)

        flushed = self.client.post("/app-state", json={"state": "background"}).json()
        assert flushed["event"]["rawTimeSeconds"] == 30

        resp = self.client.post("/screens/visit", json={"screen_name": "Profile"})
        assert resp.json()["recorded"] is False

    def test_invalid_app_state_rejected(self):
        resp = self.client.post("/app-state", json={"state": "sleeping"})
        assert resp.status_code == 422

    def test_patient_screen_time(self):
        self.client.post("/screens/visit", json={"screen_name": "Home"})
        self.clock.advance(40)
        self.client.post("/screens/visit", json={"screen_name": "Profile"})

        mine = self.client.get("/screen-time/patient/p@x.com").json()
        theirs = self.client.get("/screen-time/patient/q@x.com").json()
        assert mine["screens"]["Home Screen"]["visits"] == 1
        assert theirs["screens"] == {}
        assert theirs["total_time_seconds"] == 0
