"""
Unit tests for the Response Cache service.
"""

import pytest
from unittest.mock import AsyncMock, patch
from fastapi.testclient import TestClient

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))

from service_response_cache.app.main import ResponseCacheService
from service_response_cache.app.models import CachePolicy, CacheScope, ExecutionResult
from service_response_cache.app.store import InMemoryKeyValueStore, RedisKeyValueStore
from shared.config import get_config


class CountingExecutor:
    """Query executor stub that counts invocations."""

    def __init__(self, scope: CacheScope = CacheScope.PUBLIC, max_age: int = 60):
        self.calls = 0
        self.policy = CachePolicy(scope, max_age)

    async def __call__(self, context):
        self.calls += 1
        who = context.headers.get("X-Session-Id") or "anonymous"
        return ExecutionResult(
            data={"greeting": f"hello {who}", "call": self.calls},
            cache_policy=self.policy,
        )


class TestResponseCacheService:
    """Test cases for ResponseCacheService."""

    @pytest.fixture
    def config(self):
        return get_config("response_cache", 8020, cache_backend="memory")

    @pytest.fixture
    def executor(self):
        return CountingExecutor()

    @pytest.fixture
    def service(self, executor, config):
        return ResponseCacheService(executor=executor, config=config)

    @pytest.fixture
    def client(self, service):
        with TestClient(service.app) as client:
            yield client

    def test_health_endpoint(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["service"] == "response_cache"
        assert data["status"] == "ok"
        assert data["dependencies"] == {"store": "ok"}

    def test_memory_backend_selected(self, service):
        assert isinstance(service.store, InMemoryKeyValueStore)

    def test_redis_backend_selected(self):
        service = ResponseCacheService(config=get_config("response_cache", 8020, cache_backend="redis"))

        assert isinstance(service.store, RedisKeyValueStore)

    def test_second_anonymous_query_served_from_cache(self, client, executor):
        body = {"query": "query Q { greeting }", "operationName": "Q", "variables": {}}

        first = client.post("/query", json=body)
        second = client.post("/query", json=body)

        assert first.status_code == 200
        assert first.headers["X-Response-Cache"] == "MISS"
        assert second.headers["X-Response-Cache"] == "HIT"
        assert second.json() == first.json() == {"data": {"greeting": "hello anonymous", "call": 1}}
        assert executor.calls == 1

    def test_private_results_follow_session_header(self, config):
        executor = CountingExecutor(scope=CacheScope.PRIVATE)
        service = ResponseCacheService(executor=executor, config=config)
        body = {"query": "{ greeting }"}

        with TestClient(service.app) as client:
            client.post("/query", json=body, headers={"X-Session-Id": "alice"})
            bob = client.post("/query", json=body, headers={"X-Session-Id": "bob"})
            alice = client.post("/query", json=body, headers={"X-Session-Id": "alice"})
            anonymous = client.post("/query", json=body)

        assert bob.headers["X-Response-Cache"] == "MISS"
        assert bob.json()["data"]["greeting"] == "hello bob"
        assert alice.headers["X-Response-Cache"] == "HIT"
        assert alice.json()["data"]["greeting"] == "hello alice"
        assert anonymous.headers["X-Response-Cache"] == "MISS"
        assert executor.calls == 3

    def test_accept_language_partitions_cache(self, client, executor):
        body = {"query": "{ greeting }"}

        client.post("/query", json=body, headers={"Accept-Language": "en"})
        german = client.post("/query", json=body, headers={"Accept-Language": "de"})

        assert german.headers["X-Response-Cache"] == "MISS"
        assert executor.calls == 2

    def test_mutation_bypasses_cache(self, client, executor):
        body = {"query": "mutation Bump { greeting }"}

        first = client.post("/query", json=body)
        second = client.post("/query", json=body)

        assert first.headers["X-Response-Cache"] == "BYPASS"
        assert second.headers["X-Response-Cache"] == "BYPASS"
        assert executor.calls == 2

    def test_fragment_first_mutation_bypasses_cache(self, client, executor):
        body = {"query": ",fragment F on Mutation { greeting } mutation Bump { ...F }"}

        first = client.post("/query", json=body)
        second = client.post("/query", json=body)

        assert first.headers["X-Response-Cache"] == "BYPASS"
        assert second.headers["X-Response-Cache"] == "BYPASS"
        assert second.json()["data"]["call"] == 2
        assert executor.calls == 2

    def test_errors_are_not_cached(self, config):
        executor = AsyncMock(return_value=ExecutionResult(
            data={"greeting": None},
            errors=[{"message": "backend unavailable"}],
            cache_policy=CachePolicy(CacheScope.PUBLIC, 60),
        ))
        service = ResponseCacheService(executor=executor, config=config)
        body = {"query": "{ greeting }"}

        with TestClient(service.app) as client:
            first = client.post("/query", json=body)
            second = client.post("/query", json=body)

        assert first.json()["errors"] == [{"message": "backend unavailable"}]
        assert second.headers["X-Response-Cache"] == "MISS"
        assert executor.await_count == 2

    def test_missing_executor_is_service_error(self, config):
        service = ResponseCacheService(config=config)

        with TestClient(service.app) as client:
            response = client.post("/query", json={"query": "{ greeting }"})

        assert response.status_code == 400
        assert response.json()["code"] == "SERVICE_ERROR"

    def test_store_read_failure_fails_request(self, service):
        with patch.object(service.store, "get", new_callable=AsyncMock) as mock_get:
            mock_get.side_effect = ConnectionError("store down")

            with TestClient(service.app) as client:
                response = client.post("/query", json={"query": "{ greeting }"})

        assert response.status_code == 400
        assert response.json()["code"] == "CACHE_STORE_ERROR"

    def test_store_write_failure_does_not_fail_request(self, service, executor):
        with patch.object(service.store, "set", new_callable=AsyncMock) as mock_set:
            mock_set.side_effect = ConnectionError("store down")

            with TestClient(service.app) as client:
                response = client.post("/query", json={"query": "{ greeting }"})

        assert response.status_code == 200
        assert response.json()["data"]["greeting"] == "hello anonymous"

    def test_metrics_endpoint_reports_cache_activity(self, client):
        body = {"query": "{ greeting }"}
        client.post("/query", json=body)
        client.post("/query", json=body)

        response = client.get("/metrics")

        assert response.status_code == 200
        assert 'cache_hits_total{cache_type="no_session"} 1.0' in response.text
        assert 'cache_writes_total{outcome="written"} 1.0' in response.text
