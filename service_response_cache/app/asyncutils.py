"""
Helpers for awaiting hooks and store calls.
"""

import asyncio
import inspect
from typing import Any, Awaitable, Callable, Optional


async def with_timeout(awaitable: Awaitable[Any], timeout: Optional[float]) -> Any:
    """Await ``awaitable``, bounded by ``timeout`` seconds when one is set."""
    if timeout is None:
        return await awaitable
    return await asyncio.wait_for(awaitable, timeout)


async def call_hook(hook: Callable[..., Any], *args, timeout: Optional[float] = None) -> Any:
    """Call a sync or async hook and return its result.

    Exceptions raised by the hook propagate unchanged.
    """
    result = hook(*args)
    if inspect.isawaitable(result):
        return await with_timeout(result, timeout)
    return result
