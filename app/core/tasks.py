"""Background maintenance tasks.

The cache and the rate limiter only evict lazily, so keys that are written
once and never read again would pile up. The app lifespan runs a periodic
sweep for each store while the process is up.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Coroutine
from typing import Any, Callable

from app.adapters.cache.base import AbstractCache
from app.adapters.rate_limit.base import AbstractRateLimiter
from app.core.config import settings

logger = logging.getLogger(__name__)


def create_background_task(
    coro: Coroutine[Any, Any, Any], *, name: str = ""
) -> asyncio.Task[Any]:
    """Create an asyncio task that logs if it dies with an exception."""
    task: asyncio.Task[Any] = asyncio.create_task(coro, name=name or None)

    def _done(t: asyncio.Task[Any]) -> None:
        if t.cancelled():
            return
        if exc := t.exception():
            logger.error("background_task.failed", extra={"task_name": name, "error": str(exc)})

    task.add_done_callback(_done)
    return task


async def run_periodic(
    fn: Callable[[], Any],
    interval_seconds: float,
    *,
    name: str,
) -> None:
    """Call fn every interval_seconds until cancelled.

    A failing run is logged and the loop keeps going; the next tick retries.
    """
    while True:
        await asyncio.sleep(interval_seconds)
        try:
            fn()
        except Exception:
            logger.exception("periodic_task.failed", extra={"task_name": name})


def start_cleanup_tasks(cache: AbstractCache, limiter: AbstractRateLimiter) -> list[asyncio.Task[Any]]:
    """Schedule the cache and rate limiter sweeps on the running loop."""
    return [
        create_background_task(
            run_periodic(
                cache.cleanup,
                settings.app.cache_cleanup_interval_seconds,
                name="cache_cleanup",
            ),
            name="cache_cleanup",
        ),
        create_background_task(
            run_periodic(
                limiter.cleanup,
                settings.app.rate_limit_cleanup_interval_seconds,
                name="rate_limit_cleanup",
            ),
            name="rate_limit_cleanup",
        ),
    ]


async def stop_tasks(tasks: list[asyncio.Task[Any]]) -> None:
    """Cancel tasks and wait for them to finish."""
    for task in tasks:
        task.cancel()
    await asyncio.gather(*tasks, return_exceptions=True)
