"""
Write path: cacheability gate, scope selection and background write.
"""

import json
from dataclasses import dataclass
from enum import Enum
from typing import Optional, TYPE_CHECKING

from shared.logging import get_logger
from ..background import BackgroundWriter
from ..keys.builder import CacheKeyBuilder
from ..keys.cache_key import ContextualCacheKey
from ..models import CachePolicy, CacheScope, QueryResponse
from ..store.base import KeyValueStore
from .state import RequestCacheState

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from shared.metrics import MetricsCollector


class WriteOutcome(str, Enum):
    """Why a response was or was not written."""
    WRITTEN = "written"
    SKIPPED_BY_HOOK = "skipped_by_hook"
    NOT_CACHEABLE = "not_cacheable"
    PRIVATE_WITHOUT_SESSION_HOOK = "private_without_session_hook"
    PRIVATE_ANONYMOUS = "private_anonymous"


@dataclass(frozen=True)
class WriteDecision:
    outcome: WriteOutcome
    contextual_key: Optional[ContextualCacheKey] = None
    ttl_seconds: Optional[int] = None

    @property
    def written(self) -> bool:
        return self.outcome is WriteOutcome.WRITTEN


def is_cacheable(response: Optional[QueryResponse], policy: Optional[CachePolicy]) -> bool:
    """Only responses without an errors list, with data and a positive max age qualify."""
    if response is None or response.errors is not None or not response.data:
        return False
    return policy is not None and policy.max_age > 0


class WritePolicy:
    """Decides whether and where a computed response is cached."""

    def __init__(
        self,
        store: KeyValueStore,
        key_builder: CacheKeyBuilder,
        writer: BackgroundWriter,
        session_hook_configured: bool,
        metrics: Optional["MetricsCollector"] = None,
    ):
        self.store = store
        self.key_builder = key_builder
        self.writer = writer
        self.session_hook_configured = session_hook_configured
        self.metrics = metrics
        self.logger = get_logger("response_cache.write")

    def decide(
        self,
        state: RequestCacheState,
        response: Optional[QueryResponse],
        policy: Optional[CachePolicy],
    ) -> WriteDecision:
        if not is_cacheable(response, policy):
            return WriteDecision(WriteOutcome.NOT_CACHEABLE)

        # Writing without the read path's session resolution could store
        # private data under a public key.
        state.require_base_key()

        if policy.scope == CacheScope.PRIVATE:
            if not self.session_hook_configured:
                self.logger.warning(
                    "Response has cache scope PRIVATE but no session_id hook is "
                    "configured for the response cache. Not caching.",
                )
                return WriteDecision(WriteOutcome.PRIVATE_WITHOUT_SESSION_HOOK)
            if state.session_id is None:
                return WriteDecision(WriteOutcome.PRIVATE_ANONYMOUS)
            contextual = ContextualCacheKey.private(state.session_id)
        elif state.session_id is None:
            contextual = ContextualCacheKey.no_session()
        else:
            contextual = ContextualCacheKey.authenticated_public()

        return WriteDecision(WriteOutcome.WRITTEN, contextual, policy.max_age)

    def write(
        self,
        state: RequestCacheState,
        response: Optional[QueryResponse],
        policy: Optional[CachePolicy],
    ) -> WriteDecision:
        """Apply the decision; the store write itself runs in the background."""
        decision = self.decide(state, response, policy)

        if decision.written:
            # Both strings are built here, before anything can suspend.
            key = self.key_builder.store_key(state.base_cache_key, decision.contextual_key)
            value = json.dumps({"data": response.data}, separators=(",", ":"))
            self.writer.schedule_set(self.store, key, value, decision.ttl_seconds)
            self.logger.debug(
                "Scheduled cache write",
                session_mode=decision.contextual_key.session_mode.name.lower(),
                ttl=decision.ttl_seconds,
            )

        self.record(decision)
        return decision

    def record(self, decision: WriteDecision) -> None:
        if self.metrics:
            self.metrics.increment_counter("cache_writes_total", outcome=decision.outcome.value)
