"""
Unit tests for WritePolicy.
"""

import json

import pytest
from unittest.mock import MagicMock
from prometheus_client import CollectorRegistry

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))

from service_response_cache.app.background import BackgroundWriter
from service_response_cache.app.keys import BaseCacheKey, CacheKeyBuilder, ContextualCacheKey
from service_response_cache.app.models import CachePolicy, CacheScope, QueryResponse, SessionMode
from service_response_cache.app.policy import RequestCacheState, WriteOutcome, WritePolicy, is_cacheable
from service_response_cache.app.store import InMemoryKeyValueStore
from shared.errors import CacheInvariantError
from shared.metrics import MetricsCollector


BASE_KEY = BaseCacheKey("query Q { hello }", "Q", {}, None)
PUBLIC_60 = CachePolicy(CacheScope.PUBLIC, 60)
PRIVATE_60 = CachePolicy(CacheScope.PRIVATE, 60)
OK_RESPONSE = QueryResponse(data={"hello": "world"})


class TestIsCacheable:
    """Test cases for the cacheability gate."""

    @pytest.mark.parametrize("response,policy", [
        (QueryResponse(data={"hello": "world"}, errors=[{"message": "boom"}]), PUBLIC_60),
        (QueryResponse(data={"hello": "world"}, errors=[]), PUBLIC_60),
        (QueryResponse(data=None), PUBLIC_60),
        (QueryResponse(data={}), PUBLIC_60),
        (None, PUBLIC_60),
        (OK_RESPONSE, None),
        (OK_RESPONSE, CachePolicy(CacheScope.PUBLIC, 0)),
        (OK_RESPONSE, CachePolicy(CacheScope.PUBLIC, -5)),
    ])
    def test_not_cacheable(self, response, policy):
        assert is_cacheable(response, policy) is False

    def test_cacheable(self):
        assert is_cacheable(OK_RESPONSE, PUBLIC_60) is True


class TestWritePolicy:
    """Test cases for WritePolicy."""

    @pytest.fixture
    def store(self):
        return InMemoryKeyValueStore()

    @pytest.fixture
    def builder(self):
        return CacheKeyBuilder()

    @pytest.fixture
    def writer(self):
        writer = MagicMock(spec=BackgroundWriter)
        return writer

    @pytest.fixture
    def registry(self):
        return CollectorRegistry()

    @pytest.fixture
    def policy(self, store, builder, writer, registry):
        return WritePolicy(
            store,
            builder,
            writer,
            session_hook_configured=True,
            metrics=MetricsCollector("response_cache", registry),
        )

    def test_public_anonymous_writes_no_session(self, policy, writer, builder, store):
        decision = policy.write(RequestCacheState(None, BASE_KEY), OK_RESPONSE, PUBLIC_60)

        assert decision.written
        assert decision.contextual_key == ContextualCacheKey.no_session()
        assert decision.ttl_seconds == 60
        writer.schedule_set.assert_called_once_with(
            store,
            builder.store_key(BASE_KEY, ContextualCacheKey.no_session()),
            '{"data":{"hello":"world"}}',
            60,
        )

    def test_public_authenticated_writes_authenticated_public(self, policy):
        decision = policy.decide(RequestCacheState("alice", BASE_KEY), OK_RESPONSE, PUBLIC_60)

        assert decision.outcome is WriteOutcome.WRITTEN
        assert decision.contextual_key.session_mode == SessionMode.AUTHENTICATED_PUBLIC
        assert decision.contextual_key.session_id is None

    def test_private_with_session_writes_private(self, policy):
        decision = policy.decide(RequestCacheState("alice", BASE_KEY), OK_RESPONSE, PRIVATE_60)

        assert decision.written
        assert decision.contextual_key == ContextualCacheKey.private("alice")

    def test_private_anonymous_skips_without_error(self, policy, writer):
        """Private data is never cached for an anonymous caller."""
        decision = policy.write(RequestCacheState(None, BASE_KEY), OK_RESPONSE, PRIVATE_60)

        assert decision.outcome is WriteOutcome.PRIVATE_ANONYMOUS
        writer.schedule_set.assert_not_called()

    def test_private_without_session_hook_skips(self, store, builder, writer):
        policy = WritePolicy(store, builder, writer, session_hook_configured=False)

        decision = policy.write(RequestCacheState(None, BASE_KEY), OK_RESPONSE, PRIVATE_60)

        assert decision.outcome is WriteOutcome.PRIVATE_WITHOUT_SESSION_HOOK
        writer.schedule_set.assert_not_called()

    def test_private_without_session_hook_logs_warning(self, store, builder, writer):
        policy = WritePolicy(store, builder, writer, session_hook_configured=False)
        policy.logger = MagicMock()

        policy.write(RequestCacheState(None, BASE_KEY), OK_RESPONSE, PRIVATE_60)

        policy.logger.warning.assert_called_once()

    @pytest.mark.parametrize("response,cache_policy", [
        (QueryResponse(data={"hello": "world"}, errors=[{"message": "boom"}]), PUBLIC_60),
        (OK_RESPONSE, None),
        (OK_RESPONSE, CachePolicy(CacheScope.PUBLIC, 0)),
    ])
    def test_not_cacheable_never_writes(self, policy, writer, response, cache_policy):
        decision = policy.write(RequestCacheState(None, BASE_KEY), response, cache_policy)

        assert decision.outcome is WriteOutcome.NOT_CACHEABLE
        writer.schedule_set.assert_not_called()

    def test_write_without_base_key_is_invariant_error(self, policy, writer):
        """A cacheable write with no base key is a programming error."""
        with pytest.raises(CacheInvariantError):
            policy.write(RequestCacheState(), OK_RESPONSE, PUBLIC_60)

        writer.schedule_set.assert_not_called()

    def test_uncacheable_response_without_base_key_is_fine(self, policy):
        decision = policy.write(RequestCacheState(), QueryResponse(errors=[{"message": "parse"}]), None)

        assert decision.outcome is WriteOutcome.NOT_CACHEABLE

    def test_only_data_is_persisted(self, policy, writer):
        response = QueryResponse(data={"hello": "world"}, extensions={"tracing": {"duration": 5}})

        policy.write(RequestCacheState(None, BASE_KEY), response, PUBLIC_60)

        value = writer.schedule_set.call_args.args[2]
        assert json.loads(value) == {"data": {"hello": "world"}}

    def test_payload_snapshot_taken_before_write(self, policy, writer):
        """Mutating the response after the decision does not change what is written."""
        response = QueryResponse(data={"items": [1, 2]})

        policy.write(RequestCacheState(None, BASE_KEY), response, PUBLIC_60)
        response.data["items"].append(3)

        value = writer.schedule_set.call_args.args[2]
        assert json.loads(value) == {"data": {"items": [1, 2]}}

    def test_outcomes_are_counted(self, policy, registry):
        policy.write(RequestCacheState(None, BASE_KEY), OK_RESPONSE, PUBLIC_60)
        policy.write(RequestCacheState(None, BASE_KEY), OK_RESPONSE, PRIVATE_60)

        assert registry.get_sample_value("cache_writes_total", {"outcome": "written"}) == 1.0
        assert registry.get_sample_value("cache_writes_total", {"outcome": "private_anonymous"}) == 1.0
