"""In-memory fixed-window rate limiter (MVP).

Notes:
- Per-process only: running multiple workers multiplies the effective limit.
- Thread-safe: the read/compare/increment sequence runs under one lock.
- Windows start at the first request for a key, not on wall-clock boundaries.
  Like any fixed window, a burst straddling the window end can let through
  up to twice the limit in a short span.
"""

from __future__ import annotations

import logging
import math
import threading
import time
from dataclasses import dataclass
from typing import Callable

from app.adapters.rate_limit.base import AbstractRateLimiter, RateLimitPolicy, RateLimitResult

logger = logging.getLogger(__name__)


@dataclass
class _WindowState:
    count: int
    reset_at: float


class InMemoryFixedWindowRateLimiter(AbstractRateLimiter):
    """Rate limiter counting requests per key within a fixed window.

    Rejected requests are not counted, so retrying while blocked neither
    extends nor refills the window; the caller simply waits for reset_at.

    Important:
        This limiter is per-process only. If the API runs with multiple workers
        (e.g., multiple Uvicorn/Gunicorn workers), each worker will enforce its
        own independent limits.
    """

    def __init__(self, *, clock: Callable[[], float] = time.time) -> None:
        """Initialize the in-memory rate limiter.

        Args:
            clock: Time source function returning UNIX time in seconds.
        """
        self._clock = clock
        self._lock = threading.RLock()
        self._state_by_key: dict[str, _WindowState] = {}

    def _build_blocked_result(self, *, now: float, limit: int, reset_at: float) -> RateLimitResult:
        retry_after = max(1, int(math.ceil(reset_at - now)))
        return RateLimitResult(
            allowed=False,
            limit=limit,
            remaining=0,
            reset_at=reset_at,
            retry_after_seconds=retry_after,
        )

    def check(self, key: str, policy: RateLimitPolicy) -> RateLimitResult:
        """Count a request for key under policy.

        Any string is a valid key, the empty string included.
        """
        limit = policy.max_requests

        with self._lock:
            now = self._clock()
            state = self._state_by_key.get(key)

            if state is not None and now > state.reset_at:
                # Window rolled over; the old count no longer applies.
                del self._state_by_key[key]
                state = None

            if state is None:
                state = _WindowState(count=1, reset_at=now + policy.window_seconds)
                self._state_by_key[key] = state
                return RateLimitResult(
                    allowed=True,
                    limit=limit,
                    remaining=limit - 1,
                    reset_at=state.reset_at,
                    retry_after_seconds=None,
                )

            if state.count >= limit:
                return self._build_blocked_result(now=now, limit=limit, reset_at=state.reset_at)

            state.count += 1
            return RateLimitResult(
                allowed=True,
                limit=limit,
                remaining=limit - state.count,
                reset_at=state.reset_at,
                retry_after_seconds=None,
            )

    def cleanup(self) -> int:
        with self._lock:
            now = self._clock()
            expired = [key for key, state in self._state_by_key.items() if now > state.reset_at]
            for key in expired:
                del self._state_by_key[key]
            remaining = len(self._state_by_key)

        logger.info("rate_limit.cleanup", extra={"removed": len(expired), "size": remaining})
        return len(expired)

    def size(self) -> int:
        with self._lock:
            return len(self._state_by_key)

    def clear(self) -> None:
        """Forget every tracked key."""
        with self._lock:
            self._state_by_key.clear()
