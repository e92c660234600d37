"""
File-backed key-value store.

All keys live in one JSON object on disk. Blocking file I/O runs in a
worker thread so the event loop never stalls on disk access, and every
write replaces the file atomically (temp file + os.replace) so a crash
mid-write leaves the previous contents intact.
"""

import asyncio
import json
import os
import tempfile
from typing import Optional

from storage.base import KeyValueStore
from tracking.errors import StorageReadError, StorageWriteError


class JsonFileStore(KeyValueStore):

    def __init__(self, path: str):
        self.path = os.path.abspath(path)
        # Serializes read-modify-write of the backing file
        self._lock = asyncio.Lock()

    async def get(self, key: str) -> Optional[str]:
        data = await asyncio.to_thread(self._load)
        return data.get(key)

    async def set(self, key: str, value: str) -> None:
        async with self._lock:
            data = await asyncio.to_thread(self._load)
            data[key] = value
            await asyncio.to_thread(self._dump, data)

    async def remove(self, key: str) -> None:
        async with self._lock:
            data = await asyncio.to_thread(self._load)
            if key in data:
                del data[key]
                await asyncio.to_thread(self._dump, data)

    # ---------- blocking helpers (run in a worker thread) ----------

    def _load(self) -> dict[str, str]:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as exc:
            raise StorageReadError(f"cannot read {self.path}: {exc}") from exc
        if not isinstance(data, dict):
            raise StorageReadError(f"{self.path} does not hold a JSON object")
        return data

    def _dump(self, data: dict[str, str]) -> None:
        directory = os.path.dirname(self.path)
        try:
            os.makedirs(directory, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".store-", suffix=".json")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(data, f)
                os.replace(tmp_path, self.path)
            except BaseException:
                if os.path.exists(tmp_path):
                    os.remove(tmp_path)
                raise
        except OSError as exc:
            raise StorageWriteError(f"cannot write {self.path}: {exc}") from exc
