"""
Key-value store interface consumed by the response cache.
"""

from abc import ABC, abstractmethod
from typing import Optional


class KeyValueStore(ABC):
    """Async string key-value store with per-entry TTL."""

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """Return the stored value, or None when the key is absent."""

    @abstractmethod
    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        """Store ``value`` under ``key`` for ``ttl_seconds``."""

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """Remove ``key``; return whether it existed."""

    async def health_check(self) -> bool:
        return True

    async def close(self) -> None:
        return None


class PrefixingKeyValueStore(KeyValueStore):
    """Namespaces every key of a wrapped store under a fixed prefix."""

    def __init__(self, store: KeyValueStore, prefix: str):
        self.store = store
        self.prefix = prefix

    def _key(self, key: str) -> str:
        return f"{self.prefix}{key}"

    async def get(self, key: str) -> Optional[str]:
        return await self.store.get(self._key(key))

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        await self.store.set(self._key(key), value, ttl_seconds)

    async def delete(self, key: str) -> bool:
        return await self.store.delete(self._key(key))

    async def health_check(self) -> bool:
        return await self.store.health_check()
