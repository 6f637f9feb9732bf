"""
Redis-backed key-value store.
"""

from typing import Optional

import redis.asyncio as redis

from shared.logging import get_logger
from shared.errors import CacheStoreError
from .base import KeyValueStore


class RedisKeyValueStore(KeyValueStore):
    """Redis store for cached responses."""

    def __init__(self, redis_url: str):
        self.redis_url = redis_url
        self.logger = get_logger("response_cache.store.redis")
        self._redis: Optional[redis.Redis] = None

    async def _get_redis(self) -> redis.Redis:
        """Get Redis connection."""
        if self._redis is None:
            self._redis = redis.from_url(
                self.redis_url,
                encoding="utf-8",
                decode_responses=True,
                socket_connect_timeout=5,
                socket_timeout=5,
                retry_on_timeout=True,
                health_check_interval=30
            )
        return self._redis

    async def start(self):
        """Open the connection and make sure Redis answers."""
        try:
            redis_client = await self._get_redis()
            await redis_client.ping()
            self.logger.info("Redis store started")

        except Exception as e:
            self.logger.error("Failed to start Redis store", error=str(e))
            raise CacheStoreError("start", str(e)) from e

    async def close(self):
        """Stop the Redis store."""
        if self._redis is not None:
            await self._redis.aclose()
            self._redis = None
            self.logger.info("Redis store stopped")

    async def get(self, key: str) -> Optional[str]:
        redis_client = await self._get_redis()
        return await redis_client.get(key)

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        redis_client = await self._get_redis()
        await redis_client.set(key, value, ex=ttl_seconds)
        self.logger.debug("Cached value", key=key, ttl=ttl_seconds)

    async def delete(self, key: str) -> bool:
        redis_client = await self._get_redis()
        return bool(await redis_client.delete(key))

    async def health_check(self) -> bool:
        """Check Redis health."""
        try:
            redis_client = await self._get_redis()
            await redis_client.ping()
            return True
        except Exception as e:
            self.logger.warning("Redis health check failed", error=str(e))
            return False
