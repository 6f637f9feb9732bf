"""
Session resolution through caller hooks.
"""

from dataclasses import dataclass
from typing import Any, Optional

from shared.errors import InvalidSessionIdError
from shared.logging import get_logger
from ..asyncutils import call_hook
from ..models import RequestContext
from ..options import ResponseCacheOptions


@dataclass(frozen=True)
class ResolvedSession:
    """Session id and extra key data for one request."""
    session_id: Optional[str] = None
    extra: Any = None

    @property
    def authenticated(self) -> bool:
        return self.session_id is not None


class SessionResolver:
    """Runs the session-id and extra-cache-key-data hooks.

    Hook failures are not caught: a hook rejecting a credential must fail the
    request rather than let it continue as anonymous.
    """

    def __init__(self, options: ResponseCacheOptions, hook_timeout: Optional[float] = None):
        self.options = options
        self.hook_timeout = hook_timeout
        self.logger = get_logger("response_cache.session")

    async def resolve(self, context: RequestContext) -> ResolvedSession:
        session_id: Optional[str] = None
        extra: Any = None

        if self.options.session_id is not None:
            session_id = await call_hook(self.options.session_id, context, timeout=self.hook_timeout)
            if session_id is not None and not isinstance(session_id, str):
                self.logger.error(
                    "Session hook returned a non-string value",
                    value_type=type(session_id).__name__,
                )
                raise InvalidSessionIdError(details={"type": type(session_id).__name__})

        if self.options.extra_cache_key_data is not None:
            extra = await call_hook(self.options.extra_cache_key_data, context, timeout=self.hook_timeout)

        return ResolvedSession(session_id=session_id, extra=extra)
