"""
Cache key builder.
"""

import copy
from typing import Any

from ..models import RequestContext
from .cache_key import BaseCacheKey, CacheKey, ContextualCacheKey
from .serializer import serialize_cache_key


class CacheKeyBuilder:
    """Builds base keys per request and store keys per attempt."""

    def __init__(self, canonical: bool = True):
        self.canonical = canonical

    def build_base_key(self, context: RequestContext, extra: Any = None) -> BaseCacheKey:
        """Snapshot the request identity.

        Variables and extra data are deep-copied so later mutation of the
        request cannot change the key.
        """
        return BaseCacheKey(
            document_text=context.document_text,
            operation_name=context.operation_name,
            variables=copy.deepcopy(dict(context.request.variables or {})),
            extra=copy.deepcopy(extra),
        )

    def store_key(self, base: BaseCacheKey, contextual: ContextualCacheKey) -> str:
        """Serialized store key for one lookup or write."""
        return serialize_cache_key(CacheKey(base, contextual), canonical=self.canonical)
