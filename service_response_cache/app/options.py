"""
Caller-supplied hooks for the response cache.
"""

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, Union

from .models import RequestContext
from .store.base import KeyValueStore

SessionIdHook = Callable[[RequestContext], Union[Optional[str], Awaitable[Optional[str]]]]
ExtraCacheKeyDataHook = Callable[[RequestContext], Union[Any, Awaitable[Any]]]
CachePredicate = Callable[[RequestContext], Union[bool, Awaitable[bool]]]


@dataclass
class ResponseCacheOptions:
    """Optional hooks steering the cache; every field may be left unset.

    store
        Backing store. Falls back to the store attached to the request
        context. Keys are always namespaced under the configured prefix.
    session_id
        Returns a session id for logged-in callers, None otherwise. Must be
        set for responses with PRIVATE scope to ever be cached.
    extra_cache_key_data
        Any JSON-representable value mixed into the cache key, e.g. the
        caller's preferred language.
    should_read_from_cache / should_write_to_cache
        Returning False skips the read or the write for that request.
    """
    store: Optional[KeyValueStore] = None
    session_id: Optional[SessionIdHook] = None
    extra_cache_key_data: Optional[ExtraCacheKeyDataHook] = None
    should_read_from_cache: Optional[CachePredicate] = None
    should_write_to_cache: Optional[CachePredicate] = None

    @property
    def has_session_hook(self) -> bool:
        return self.session_id is not None
