"""
Cache key value objects.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from ..models import SessionMode


@dataclass(frozen=True)
class BaseCacheKey:
    """Request-identity part of a cache key, fixed once per request."""
    document_text: str
    operation_name: Optional[str]
    variables: Dict[str, Any]
    extra: Any = None


@dataclass(frozen=True)
class ContextualCacheKey:
    """Session part of a cache key, built per lookup or write attempt."""
    session_mode: SessionMode
    session_id: Optional[str] = None

    def __post_init__(self):
        if self.session_mode == SessionMode.PRIVATE and self.session_id is None:
            raise ValueError("A private cache key needs a session id")
        if self.session_mode != SessionMode.PRIVATE and self.session_id is not None:
            raise ValueError("Only private cache keys carry a session id")

    @classmethod
    def no_session(cls) -> "ContextualCacheKey":
        return cls(SessionMode.NO_SESSION)

    @classmethod
    def private(cls, session_id: str) -> "ContextualCacheKey":
        return cls(SessionMode.PRIVATE, session_id)

    @classmethod
    def authenticated_public(cls) -> "ContextualCacheKey":
        return cls(SessionMode.AUTHENTICATED_PUBLIC)


@dataclass(frozen=True)
class CacheKey:
    """Full cache key: base fields merged with contextual fields."""
    base: BaseCacheKey
    contextual: ContextualCacheKey

    def to_dict(self) -> Dict[str, Any]:
        """Structured form that gets hashed into the store key."""
        key: Dict[str, Any] = {
            "documentText": self.base.document_text,
            "operationName": self.base.operation_name,
            "variables": self.base.variables,
            "extra": self.base.extra,
        }
        # sessionId precedes sessionMode when present
        if self.contextual.session_id is not None:
            key["sessionId"] = self.contextual.session_id
        key["sessionMode"] = int(self.contextual.session_mode)
        return key
