"""Rate limiter interfaces.

The API should depend on this abstraction (not the concrete implementation)
so we can swap storage backends later (e.g., Redis) with minimal changes.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class RateLimitPolicy:
    """How many requests one identity may make per window for one action.

    Attributes:
        max_requests: Requests allowed within a window.
        window_seconds: Window length, counted from the first request.
    """

    max_requests: int
    window_seconds: float

    def __post_init__(self) -> None:
        if self.max_requests < 1:
            raise ValueError("max_requests must be >= 1")
        if self.window_seconds <= 0:
            raise ValueError("window_seconds must be > 0")


@dataclass(frozen=True)
class RateLimitResult:
    """Result of a rate limit check.

    Attributes:
        allowed: Whether the request is allowed to proceed.
        limit: Max requests per window.
        remaining: Remaining requests in the current window (0 when blocked).
        reset_at: UNIX epoch seconds when the current window ends.
        retry_after_seconds: Suggested wait in whole seconds when blocked.
    """

    allowed: bool
    limit: int
    remaining: int
    reset_at: float
    retry_after_seconds: int | None


class AbstractRateLimiter(ABC):
    """Interface for rate limiters."""

    @abstractmethod
    def check(self, key: str, policy: RateLimitPolicy) -> RateLimitResult:
        """Count one request for key and decide whether it may proceed.

        Args:
            key: Identity + action key (e.g., ``vote:user:42``).
            policy: Limit and window to enforce for this key.

        Returns:
            RateLimitResult describing whether it was allowed.
        """
        raise NotImplementedError

    @abstractmethod
    def cleanup(self) -> int:
        """Drop records whose window has ended and return how many were removed."""
        raise NotImplementedError

    @abstractmethod
    def size(self) -> int:
        """Return the number of tracked keys."""
        raise NotImplementedError
