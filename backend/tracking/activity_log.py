"""
Persisted activity log, the single writer of the `activityHistory` key.

The log is one JSON document holding every event, newest first, capped at
HISTORY_LIMIT entries (oldest dropped). Appends are serialized through an
asyncio.Lock so two concurrent record() calls can no longer overwrite each
other's snapshot.

Persisted shape:
    {"version": 1, "events": [ {...}, {...} ]}
A bare JSON array (written by older clients) is read as version 0.

Public methods never raise: read() degrades to an empty log, append()
returns None and clear() returns False on failure.
"""

import asyncio
import json
import logging
from typing import Any, Optional

from pydantic import ValidationError
from pydantic_core import PydanticSerializationError

import config
from models.event import ActivityEvent
from storage.base import KeyValueStore
from tracking.errors import (
    MalformedEventError,
    StorageReadError,
    StorageTimeout,
    StorageWriteError,
    TrackingError,
)

logger = logging.getLogger(__name__)


def parse_event(raw: Any) -> ActivityEvent:
    """Validate one stored entry. Raises MalformedEventError."""
    if not isinstance(raw, dict):
        raise MalformedEventError(f"expected an object, got {type(raw).__name__}")
    try:
        return ActivityEvent.model_validate(raw)
    except ValidationError as exc:
        raise MalformedEventError(str(exc)) from exc


def decode_log(payload: Optional[str]) -> list[Any]:
    """
    Decode the stored document into its raw entry list.

    Accepts the versioned envelope and legacy bare arrays. Raises
    StorageReadError when the document is neither.
    """
    if not payload:
        return []
    try:
        data = json.loads(payload)
    except json.JSONDecodeError as exc:
        raise StorageReadError(f"activity log is not valid JSON: {exc}") from exc

    if isinstance(data, list):
        return data  # version 0
    if isinstance(data, dict) and isinstance(data.get("events"), list):
        return data["events"]
    raise StorageReadError("activity log has an unrecognised shape")


def encode_log(entries: list[Any]) -> str:
    return json.dumps({"version": config.LOG_SCHEMA_VERSION, "events": entries})


class ActivityLog:

    def __init__(
        self,
        store: KeyValueStore,
        *,
        key: str = config.HISTORY_KEY,
        limit: int = config.HISTORY_LIMIT,
        timeout: float = config.STORE_TIMEOUT,
    ):
        self.store = store
        self.key = key
        self.limit = limit
        self.timeout = timeout
        self._write_lock = asyncio.Lock()

    # ---------- bounded store access ----------

    async def get_value(self, key: str) -> Optional[str]:
        """Read any key through the configured timeout. Raises StorageError."""
        try:
            return await asyncio.wait_for(self.store.get(key), self.timeout)
        except asyncio.TimeoutError as exc:
            raise StorageTimeout(f"get {key!r} timed out after {self.timeout}s") from exc
        except TrackingError:
            raise
        except Exception as exc:
            raise StorageReadError(f"get {key!r} failed: {exc}") from exc

    async def _set_value(self, value: str) -> None:
        try:
            await asyncio.wait_for(self.store.set(self.key, value), self.timeout)
        except asyncio.TimeoutError as exc:
            raise StorageTimeout(f"set {self.key!r} timed out after {self.timeout}s") from exc
        except TrackingError:
            raise
        except Exception as exc:
            raise StorageWriteError(f"set {self.key!r} failed: {exc}") from exc

    async def _load_entries(self) -> list[Any]:
        return decode_log(await self.get_value(self.key))

    # ---------- public API ----------

    async def read(self) -> list[ActivityEvent]:
        """All well-formed events, newest first. Never raises."""
        try:
            entries = await self._load_entries()
        except TrackingError as exc:
            logger.warning("ActivityLog: read failed, treating log as empty: %s", exc)
            return []

        events: list[ActivityEvent] = []
        for index, raw in enumerate(entries):
            try:
                events.append(parse_event(raw))
            except MalformedEventError as exc:
                logger.warning("ActivityLog: skipping malformed entry %d: %s", index, exc)
        return events

    async def append(self, event: ActivityEvent) -> Optional[ActivityEvent]:
        """
        Prepend one event and truncate to the retention limit.

        Returns the stored event, or None when the log could not be read or
        written. Unparseable entries already in the log are carried over
        untouched; a log whose document cannot be decoded is left alone.
        """
        try:
            stored = event.to_storage()
        except PydanticSerializationError as exc:
            logger.warning("ActivityLog: event %r is not JSON-serializable: %s", event.activity, exc)
            return None

        async with self._write_lock:
            try:
                entries = await self._load_entries()
                updated = [stored] + entries
                await self._set_value(encode_log(updated[: self.limit]))
            except TrackingError as exc:
                logger.warning("ActivityLog: append failed for %r: %s", event.activity, exc)
                return None
        return event

    async def clear(self) -> bool:
        """Replace the whole log with an empty one. Idempotent."""
        async with self._write_lock:
            try:
                await self._set_value(encode_log([]))
            except TrackingError as exc:
                logger.warning("ActivityLog: clear failed: %s", exc)
                return False
        return True
