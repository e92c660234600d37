"""
Shared fixtures: an in-memory store, a controllable clock, and helpers for
building stored events without going through the recorder.
"""

import json
from datetime import datetime, timedelta, timezone

import pytest

from storage.memory import InMemoryStore

T0 = datetime(2026, 1, 1, 9, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime = T0):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


def make_event(**fields) -> dict:
    """A stored (wire-shape) event with sensible defaults."""
    base = {
        "id": "1",
        "activity": "Visited Home Screen",
        "category": "Navigation",
        "timestamp": "2026-01-01T09:00:00Z",
    }
    base.update(fields)
    return base


def user_data(**fields) -> str:
    return json.dumps({"id": "u1", "email": "a@x.com", "name": "Ada", **fields})


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def kv():
    return InMemoryStore()
