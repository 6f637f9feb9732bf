"""
In-process key-value store.
"""

import time
from typing import Callable, Dict, Optional, Tuple

from shared.logging import get_logger
from .base import KeyValueStore


class InMemoryKeyValueStore(KeyValueStore):
    """Dictionary-backed store with TTL expiry.

    Expired entries are dropped lazily on read. ``set`` completes without
    suspending, so a scheduled write lands on the first loop iteration.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._entries: Dict[str, Tuple[str, float]] = {}
        self.logger = get_logger("response_cache.store.memory")

    async def get(self, key: str) -> Optional[str]:
        entry = self._entries.get(key)
        if entry is None:
            return None

        value, expires_at = entry
        if expires_at <= self._clock():
            del self._entries[key]
            return None
        return value

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        self._entries[key] = (value, self._clock() + ttl_seconds)
        self.logger.debug("Stored value", key=key, ttl=ttl_seconds)

    async def delete(self, key: str) -> bool:
        return self._entries.pop(key, None) is not None

    def __len__(self) -> int:
        return len(self._entries)

    def keys(self):
        return list(self._entries.keys())
