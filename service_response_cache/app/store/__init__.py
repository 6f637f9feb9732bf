"""
Key-value store adapters used by the response cache.
"""

from .base import KeyValueStore, PrefixingKeyValueStore
from .memory import InMemoryKeyValueStore
from .redis_store import RedisKeyValueStore

__all__ = [
    "KeyValueStore",
    "PrefixingKeyValueStore",
    "InMemoryKeyValueStore",
    "RedisKeyValueStore",
]
