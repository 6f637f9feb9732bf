"""
Response Cache service.

Serves ``POST /query`` with the response cache wrapped around a pluggable
query executor.
"""

from typing import Awaitable, Callable, Dict, Optional

from fastapi import Request, Response

from shared.base_service import BaseService
from shared.config import ServiceConfig, get_config
from shared.errors import ServiceError
from .models import ExecutionResult, QueryRequest, QueryResponse, RequestContext
from .options import ResponseCacheOptions
from .plugin import ResponseCachePlugin
from .store.base import KeyValueStore
from .store.memory import InMemoryKeyValueStore
from .store.redis_store import RedisKeyValueStore

QueryExecutor = Callable[[RequestContext], Awaitable[ExecutionResult]]

CACHE_STATUS_HEADER = "X-Response-Cache"


class ResponseCacheService(BaseService):
    """Response cache service implementation."""

    def __init__(
        self,
        executor: Optional[QueryExecutor] = None,
        options: Optional[ResponseCacheOptions] = None,
        config: Optional[ServiceConfig] = None,
    ):
        super().__init__("response_cache", 8020, config=config)
        self.executor = executor
        self.store = self._create_store()
        self.options = options or self._default_options()
        self.plugin = ResponseCachePlugin(self.options, self.config, metrics=self.metrics)

        @self.app.on_event("startup")
        async def _startup():
            if isinstance(self.store, RedisKeyValueStore):
                await self.store.start()

        @self.app.on_event("shutdown")
        async def _shutdown():
            await self.plugin.drain()
            await self.store.close()

        self._setup_query_routes()

    def _create_store(self) -> KeyValueStore:
        backend = self.config.cache_backend.lower()
        if backend == "redis":
            return RedisKeyValueStore(self.config.redis_url)
        if backend != "memory":
            self.logger.warning("Unknown cache backend, using in-memory store", backend=backend)
        return InMemoryKeyValueStore()

    def _default_options(self) -> ResponseCacheOptions:
        """Session id from the configured header, language as extra key data."""
        session_header = self.config.session_header

        def session_id(context: RequestContext) -> Optional[str]:
            return context.headers.get(session_header) or None

        def extra_cache_key_data(context: RequestContext) -> Optional[str]:
            return context.headers.get("Accept-Language")

        return ResponseCacheOptions(
            session_id=session_id,
            extra_cache_key_data=extra_cache_key_data,
        )

    async def _check_dependencies(self) -> Dict[str, str]:
        healthy = await self.store.health_check()
        return {"store": "ok" if healthy else "error"}

    def _setup_query_routes(self):
        """Set up query routes."""

        @self.app.post("/query", response_model=QueryResponse, response_model_exclude_none=True)
        async def run_query(body: QueryRequest, request: Request, response: Response):
            """Execute a query, serving and storing results through the cache."""
            context = RequestContext.from_request(body, headers=request.headers, store=self.store)
            listener = self.plugin.request_did_start(context)

            cached = await listener.executor(context)
            if cached is not None:
                context.response = QueryResponse(data=cached.get("data"))
                response.headers[CACHE_STATUS_HEADER] = "HIT"
            else:
                if self.executor is None:
                    raise ServiceError("No query executor configured")
                result = await self.executor(context)
                context.response = QueryResponse(data=result.data, errors=result.errors)
                context.overall_cache_policy = result.cache_policy
                response.headers[CACHE_STATUS_HEADER] = "MISS" if context.is_query else "BYPASS"

            await listener.will_send_response(context)
            return context.response


def create_app(
    executor: Optional[QueryExecutor] = None,
    options: Optional[ResponseCacheOptions] = None,
    config: Optional[ServiceConfig] = None,
):
    """Create FastAPI application."""
    service = ResponseCacheService(executor=executor, options=options, config=config)
    return service.app


if __name__ == "__main__":
    service = ResponseCacheService(config=get_config("response_cache", 8020))
    service.run()
