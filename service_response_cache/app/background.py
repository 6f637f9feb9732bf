"""
Fire-and-forget store writes.
"""

import asyncio
from typing import Optional, Set, TYPE_CHECKING

from shared.logging import get_logger
from .asyncutils import with_timeout
from .store.base import KeyValueStore

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from shared.metrics import MetricsCollector


class BackgroundWriter:
    """Runs cache writes as independent tasks.

    The request path never awaits a write. Tasks are referenced until they
    finish, and failures go to the log and the store error counter instead
    of the caller.
    """

    def __init__(
        self,
        metrics: Optional["MetricsCollector"] = None,
        store_timeout: Optional[float] = None,
    ):
        self.metrics = metrics
        self.store_timeout = store_timeout
        self.logger = get_logger("response_cache.background")
        self._tasks: Set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def schedule_set(self, store: KeyValueStore, key: str, value: str, ttl_seconds: int) -> asyncio.Task:
        """Start writing ``value`` under ``key`` and return immediately.

        ``key`` and ``value`` must already be strings; nothing the caller
        mutates afterwards can reach the write.
        """
        task = asyncio.get_running_loop().create_task(self._set(store, key, value, ttl_seconds))
        self._tasks.add(task)
        task.add_done_callback(self._on_done)
        return task

    async def _set(self, store: KeyValueStore, key: str, value: str, ttl_seconds: int) -> bool:
        try:
            await with_timeout(store.set(key, value, ttl_seconds), self.store_timeout)
            return True
        except Exception as e:
            self.logger.warning(
                "Cache store write failed",
                key=key,
                ttl=ttl_seconds,
                error=str(e),
                error_type=type(e).__name__,
            )
            if self.metrics:
                self.metrics.increment_counter("cache_store_errors_total", operation="set")
            return False

    def _on_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            self.logger.debug("Cache store write cancelled")

    async def drain(self) -> None:
        """Wait for every write scheduled so far."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
