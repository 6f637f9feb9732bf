"""
Response cache engine.

Derives session-aware cache keys for query requests, serves cached results
and writes fresh ones back to a key-value store without blocking responses.
"""

from .models import (
    CachePolicy,
    CacheScope,
    ExecutionResult,
    OperationType,
    QueryRequest,
    QueryResponse,
    RequestContext,
    SessionMode,
)
from .options import ResponseCacheOptions
from .plugin import ResponseCachePlugin, ResponseCacheRequestListener

__all__ = [
    "CachePolicy",
    "CacheScope",
    "ExecutionResult",
    "OperationType",
    "QueryRequest",
    "QueryResponse",
    "RequestContext",
    "SessionMode",
    "ResponseCacheOptions",
    "ResponseCachePlugin",
    "ResponseCacheRequestListener",
]
