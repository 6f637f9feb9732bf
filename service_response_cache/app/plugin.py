"""
Response cache plugin.

The plugin is created once per service. For every request it hands out a
``ResponseCacheRequestListener`` that owns that request's cache state and
exposes the two lifecycle entry points the host pipeline calls:

- ``executor`` before the query runs; a non-None result replaces execution.
- ``will_send_response`` once a response exists; may schedule a cache write.

Only query operations take part. Mutations and subscriptions pass through.
"""

from typing import Any, Dict, Optional, TYPE_CHECKING

from shared.config import BaseConfig
from shared.errors import ServiceError
from shared.logging import get_logger, set_request_context
from .asyncutils import call_hook
from .background import BackgroundWriter
from .keys.builder import CacheKeyBuilder
from .models import RequestContext
from .options import ResponseCacheOptions
from .policy.lookup import LookupPolicy
from .policy.state import RequestCacheState
from .policy.write import WriteDecision, WriteOutcome, WritePolicy
from .session.resolver import SessionResolver
from .store.base import KeyValueStore, PrefixingKeyValueStore

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from shared.metrics import MetricsCollector


DEFAULT_KEY_PREFIX = "fqc:"


class ResponseCachePlugin:
    """Session-aware response cache in front of query execution."""

    def __init__(
        self,
        options: Optional[ResponseCacheOptions] = None,
        settings: Optional[BaseConfig] = None,
        *,
        metrics: Optional["MetricsCollector"] = None,
        writer: Optional[BackgroundWriter] = None,
    ):
        self.options = options or ResponseCacheOptions()
        self.settings = settings or BaseConfig()
        self.metrics = metrics
        self.logger = get_logger("response_cache.plugin")

        self.key_prefix = self.settings.key_prefix or DEFAULT_KEY_PREFIX
        self.key_builder = CacheKeyBuilder(canonical=self.settings.canonicalize_cache_keys)
        self.session_resolver = SessionResolver(self.options, self.settings.hook_timeout_seconds)
        self.writer = writer or BackgroundWriter(
            metrics=metrics,
            store_timeout=self.settings.store_timeout_seconds,
        )

    def _store_for(self, context: RequestContext) -> KeyValueStore:
        store = self.options.store or context.store
        if store is None:
            raise ServiceError("No key-value store configured for the response cache")
        return PrefixingKeyValueStore(store, self.key_prefix)

    def request_did_start(self, context: RequestContext) -> "ResponseCacheRequestListener":
        store = self._store_for(context)
        return ResponseCacheRequestListener(
            plugin=self,
            lookup=LookupPolicy(
                store,
                self.key_builder,
                metrics=self.metrics,
                store_timeout=self.settings.store_timeout_seconds,
            ),
            write=WritePolicy(
                store,
                self.key_builder,
                self.writer,
                session_hook_configured=self.options.has_session_hook,
                metrics=self.metrics,
            ),
        )

    async def drain(self) -> None:
        """Wait for background writes, e.g. at shutdown."""
        await self.writer.drain()


class ResponseCacheRequestListener:
    """Cache lifecycle for exactly one request."""

    def __init__(self, plugin: ResponseCachePlugin, lookup: LookupPolicy, write: WritePolicy):
        self.plugin = plugin
        self.lookup_policy = lookup
        self.write_policy = write
        self.state = RequestCacheState()

    @property
    def options(self) -> ResponseCacheOptions:
        return self.plugin.options

    @property
    def hook_timeout(self) -> Optional[float]:
        return self.plugin.settings.hook_timeout_seconds

    async def executor(self, context: RequestContext) -> Optional[Dict[str, Any]]:
        """Read path. Returns the cached payload, or None to execute."""
        if not context.is_query:
            return None

        session = await self.plugin.session_resolver.resolve(context)
        self.state.populate(
            session.session_id,
            self.plugin.key_builder.build_base_key(context, session.extra),
        )
        set_request_context(operation_name=context.operation_name, authenticated=session.authenticated)

        # State is set up first so the write path still runs when reads
        # are turned off for this request.
        if self.options.should_read_from_cache is not None:
            should_read = await call_hook(self.options.should_read_from_cache, context, timeout=self.hook_timeout)
            if not should_read:
                self.plugin.logger.debug("Cache read skipped by hook")
                return None

        if self.plugin.metrics:
            with self.plugin.metrics.time_operation("cache_lookup_duration_seconds"):
                return await self.lookup_policy.lookup(self.state)
        return await self.lookup_policy.lookup(self.state)

    async def will_send_response(self, context: RequestContext) -> Optional[WriteDecision]:
        """Write path. Returns the decision taken, or None for non-queries."""
        if not context.is_query:
            return None

        if self.options.should_write_to_cache is not None:
            should_write = await call_hook(self.options.should_write_to_cache, context, timeout=self.hook_timeout)
            if not should_write:
                decision = WriteDecision(WriteOutcome.SKIPPED_BY_HOOK)
                self.write_policy.record(decision)
                return decision

        return self.write_policy.write(self.state, context.response, context.overall_cache_policy)
