"""
Process-wide tracking objects shared across all routes.

One key-value store, one activity log over it, one recorder and one dwell
tracker per running app session. ACTIVITY_STORE_PATH selects a JSON file
store; without it everything lives in memory.
"""

import config
from storage import InMemoryStore, JsonFileStore, KeyValueStore
from tracking.activity_log import ActivityLog
from tracking.dwell import DwellTracker
from tracking.recorder import EventRecorder


def build_store() -> KeyValueStore:
    if config.STORE_PATH:
        return JsonFileStore(config.STORE_PATH)
    return InMemoryStore()


kv_store: KeyValueStore = build_store()
activity_log = ActivityLog(kv_store)
recorder = EventRecorder(activity_log)
dwell_tracker = DwellTracker(recorder)


def reset(kv: KeyValueStore, **recorder_options) -> None:
    """Rebuild every shared object over `kv` (tests, store switch)."""
    global kv_store, activity_log, recorder, dwell_tracker
    kv_store = kv
    activity_log = ActivityLog(kv)
    recorder = EventRecorder(activity_log, **recorder_options)
    dwell_tracker = DwellTracker(recorder)
