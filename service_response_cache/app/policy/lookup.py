"""
Read path: ordered lookups against the store.
"""

import json
from typing import Any, Dict, Optional, TYPE_CHECKING

from shared.errors import CacheStoreError
from shared.logging import get_logger
from ..asyncutils import with_timeout
from ..keys.builder import CacheKeyBuilder
from ..keys.cache_key import BaseCacheKey, ContextualCacheKey
from ..store.base import KeyValueStore
from .state import RequestCacheState

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from shared.metrics import MetricsCollector


class LookupPolicy:
    """Finds a cached payload for a request.

    Anonymous callers read the no-session entry. Callers with a session read
    their private entry first and fall back to the authenticated-public one,
    so a personalised result is never shadowed by a public one. Reads are
    sequential; at most two happen per request.
    """

    def __init__(
        self,
        store: KeyValueStore,
        key_builder: CacheKeyBuilder,
        metrics: Optional["MetricsCollector"] = None,
        store_timeout: Optional[float] = None,
    ):
        self.store = store
        self.key_builder = key_builder
        self.metrics = metrics
        self.store_timeout = store_timeout
        self.logger = get_logger("response_cache.lookup")

    async def lookup(self, state: RequestCacheState) -> Optional[Dict[str, Any]]:
        base = state.require_base_key()

        if state.session_id is None:
            return await self._get(base, ContextualCacheKey.no_session())

        private_response = await self._get(base, ContextualCacheKey.private(state.session_id))
        if private_response is not None:
            return private_response

        return await self._get(base, ContextualCacheKey.authenticated_public())

    async def _get(self, base: BaseCacheKey, contextual: ContextualCacheKey) -> Optional[Dict[str, Any]]:
        key = self.key_builder.store_key(base, contextual)
        cache_type = contextual.session_mode.name.lower()

        try:
            value = await with_timeout(self.store.get(key), self.store_timeout)
        except Exception as e:
            self.logger.error(
                "Cache store read failed",
                session_mode=cache_type,
                error=str(e),
                error_type=type(e).__name__,
            )
            self._count("cache_store_errors_total", operation="get")
            raise CacheStoreError("get", str(e) or type(e).__name__) from e

        if value is None:
            self._count("cache_misses_total", cache_type=cache_type)
            return None

        try:
            payload = json.loads(value)
        except (TypeError, json.JSONDecodeError):
            payload = None

        if not isinstance(payload, dict) or "data" not in payload:
            self.logger.warning("Failed to deserialize cached response", session_mode=cache_type)
            self._count("cache_misses_total", cache_type=cache_type)
            return None

        self._count("cache_hits_total", cache_type=cache_type)
        self.logger.debug("Cache hit", session_mode=cache_type)
        return payload

    def _count(self, metric_name: str, **labels) -> None:
        if self.metrics:
            self.metrics.increment_counter(metric_name, **labels)
