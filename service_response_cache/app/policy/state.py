"""
Per-request cache state.
"""

from dataclasses import dataclass
from typing import Optional

from shared.errors import CacheInvariantError
from ..keys.cache_key import BaseCacheKey


@dataclass
class RequestCacheState:
    """Session id and base key for a single in-flight request.

    Populated once by the read path and only read by the write path. Never
    shared between requests.
    """
    session_id: Optional[str] = None
    base_cache_key: Optional[BaseCacheKey] = None

    def populate(self, session_id: Optional[str], base_cache_key: BaseCacheKey) -> None:
        if self.base_cache_key is not None:
            raise CacheInvariantError("Request cache state populated twice")
        self.session_id = session_id
        self.base_cache_key = base_cache_key

    def require_base_key(self) -> BaseCacheKey:
        if self.base_cache_key is None:
            raise CacheInvariantError(
                "Cache write attempted before the read path established the base key"
            )
        return self.base_cache_key
