"""Rate limiting dependency for FastAPI routes.

This module wires the rate limiting adapter into the HTTP layer.

Design goals:
- Minimal coupling: API routes depend on a dependency factory only.
- Swap-friendly: storage backend can be replaced (e.g., Redis) behind an
  abstract interface.
- One policy per action, so spamming votes doesn't eat the budget for
  proposing hot topics.

Rate limiting strategy (MVP):
- Fixed window per (action, identity), anchored at the first request.
- Identity is the authenticated user id; anonymous callers fall back to
  their client address.
"""

from __future__ import annotations

import logging
import math
from typing import Annotated, Awaitable, Callable

from fastapi import Depends, HTTPException, Request, Response, status

from app.adapters.rate_limit.base import AbstractRateLimiter, RateLimitPolicy
from app.adapters.rate_limit.in_memory import InMemoryFixedWindowRateLimiter
from app.core.auth import get_current_user_id
from app.core.config import settings
from app.core.logging import hash_identifier

logger = logging.getLogger(__name__)

VOTE = "vote"
HOT_TOPIC_CREATE = "hot_topic_create"
HOT_TOPIC_VOTE = "hot_topic_vote"

_limiter: AbstractRateLimiter | None = None


def get_rate_limiter() -> AbstractRateLimiter:
    """Return the process-wide rate limiter, creating it on first use."""

    global _limiter

    if _limiter is None:
        _limiter = InMemoryFixedWindowRateLimiter()
    return _limiter


def get_policy(action: str) -> RateLimitPolicy:
    """Resolve the configured policy for an action.

    Raises:
        KeyError: If the action has no configured policy.
    """
    app_settings = settings.app
    policies = {
        VOTE: (
            app_settings.rate_limit_vote_requests,
            app_settings.rate_limit_vote_window_seconds,
        ),
        HOT_TOPIC_CREATE: (
            app_settings.rate_limit_hot_topic_create_requests,
            app_settings.rate_limit_hot_topic_create_window_seconds,
        ),
        HOT_TOPIC_VOTE: (
            app_settings.rate_limit_hot_topic_vote_requests,
            app_settings.rate_limit_hot_topic_vote_window_seconds,
        ),
    }
    max_requests, window_seconds = policies[action]
    return RateLimitPolicy(max_requests=max_requests, window_seconds=window_seconds)


def client_address(request: Request) -> str:
    """Best-effort client address, honouring proxy headers."""

    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first

    real_ip = request.headers.get("x-real-ip", "").strip()
    if real_ip:
        return real_ip

    return request.client.host if request.client else "unknown"


def build_rate_limit_key(action: str, request: Request, user_id: str | None) -> str:
    """Build the limiter key for an action and the caller's identity."""

    if user_id:
        return f"{action}:user:{user_id}"
    return f"{action}:ip:{client_address(request)}"


def rate_limited(action: str) -> Callable[..., Awaitable[None]]:
    """Build a dependency that enforces the policy configured for action.

    Usage:
        @router.post("/things", dependencies=[Depends(rate_limited("vote"))])

    Raises:
        KeyError: If action has no configured policy (at import time).
    """
    get_policy(action)

    async def enforce_rate_limit(
        request: Request,
        response: Response,
        user_id: Annotated[str | None, Depends(get_current_user_id)],
        limiter: Annotated[AbstractRateLimiter, Depends(get_rate_limiter)],
    ) -> None:
        if not settings.app.rate_limit_enabled:
            return

        policy = get_policy(action)
        key = build_rate_limit_key(action, request, user_id)
        key_hash = hash_identifier(key)
        key_type = "user" if user_id else "ip"

        result = limiter.check(key, policy)
        include_headers = settings.app.rate_limit_include_headers

        if result.allowed:
            logger.info(
                "rate_limit.allowed",
                extra={
                    "action": action,
                    "key_type": key_type,
                    "key_hash": key_hash,
                    "limit": result.limit,
                    "remaining": result.remaining,
                    "window_s": policy.window_seconds,
                },
            )
            if include_headers:
                response.headers["X-RateLimit-Limit"] = str(result.limit)
                response.headers["X-RateLimit-Remaining"] = str(result.remaining)
            return

        retry_after = result.retry_after_seconds or 1
        logger.warning(
            "rate_limit.exceeded",
            extra={
                "action": action,
                "key_type": key_type,
                "key_hash": key_hash,
                "limit": result.limit,
                "window_s": policy.window_seconds,
                "retry_after_s": retry_after,
            },
        )

        # Retry-After is sent even when X-RateLimit-* headers are disabled.
        headers = {"Retry-After": str(retry_after)}
        if include_headers:
            headers["X-RateLimit-Limit"] = str(result.limit)
            headers["X-RateLimit-Remaining"] = str(result.remaining)
            headers["X-RateLimit-Reset"] = str(math.ceil(result.reset_at))

        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Too many requests. Please try again later.",
            headers=headers,
        )

    return enforce_rate_limit
