from storage.base import KeyValueStore
from storage.memory import InMemoryStore
from storage.json_file import JsonFileStore

__all__ = ["KeyValueStore", "InMemoryStore", "JsonFileStore"]
