from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from app.adapters.cache.base import AbstractCache
from app.adapters.rate_limit.base import AbstractRateLimiter
from app.api.deps import get_cache
from app.core.rate_limit import get_rate_limiter

router = APIRouter(tags=["Health"])


@router.get("/health")
def health_check(
    cache: Annotated[AbstractCache, Depends(get_cache)],
    limiter: Annotated[AbstractRateLimiter, Depends(get_rate_limiter)],
) -> dict:
    """Liveness check with in-memory store sizes.

    Used by load balancers and monitoring systems to determine service
    health; the sizes help spot a stalled cleanup sweep.
    """

    return {
        "status": "ok",
        "cache_entries": cache.size(),
        "rate_limit_keys": limiter.size(),
    }
