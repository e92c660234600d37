from abc import ABC, abstractmethod
from typing import Optional


class KeyValueStore(ABC):
    """
    Asynchronous string key-value store, the shape of the mobile client's
    persisted storage. Values are opaque strings (JSON in practice).
    """

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """Return the stored value, or None when the key is absent."""

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        ...

    @abstractmethod
    async def remove(self, key: str) -> None:
        ...
