"""
Cache key derivation: value objects, builder and serializer.
"""

from .cache_key import BaseCacheKey, CacheKey, ContextualCacheKey
from .builder import CacheKeyBuilder
from .serializer import encode_cache_key, serialize_cache_key

__all__ = [
    "BaseCacheKey",
    "CacheKey",
    "ContextualCacheKey",
    "CacheKeyBuilder",
    "encode_cache_key",
    "serialize_cache_key",
]
