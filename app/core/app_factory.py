"""Application factory for FastAPI app.

Centralizes app construction (metadata, middleware, handlers, routers,
background sweeps) so tests can build isolated instances.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.api.deps import get_cache
from app.api.routes import (
    health_router,
    hot_topics_router,
    jobs_router,
    matches_router,
    rooms_router,
)
from app.core.config import settings
from app.core.exception_handlers import setup_exception_handlers
from app.core.logging import configure_logging
from app.core.middleware import request_id_middleware
from app.core.openapi import apply_openapi_customizations
from app.core.rate_limit import get_rate_limiter
from app.core.tasks import start_cleanup_tasks, stop_tasks

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Run the cache and rate limiter sweeps for the lifetime of the app.

    Uses the same instances the routes receive, honouring any
    dependency overrides installed on the app.
    """
    overrides = app.dependency_overrides
    cache = overrides.get(get_cache, get_cache)()
    limiter = overrides.get(get_rate_limiter, get_rate_limiter)()

    tasks = start_cleanup_tasks(cache, limiter)
    logger.info(
        "app.startup",
        extra={
            "app_env": settings.app_env,
            "cache_cleanup_interval_s": settings.app.cache_cleanup_interval_seconds,
            "rate_limit_cleanup_interval_s": settings.app.rate_limit_cleanup_interval_seconds,
        },
    )
    try:
        yield
    finally:
        await stop_tasks(tasks)
        logger.info("app.shutdown")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application instance.

    Returns:
        Configured FastAPI app with middleware, handlers, routers and docs.
    """
    # Logging first so subsequent init logs are formatted as desired
    configure_logging(settings.log)

    app = FastAPI(
        title="Match Rooms API",
        description=(
            "Live match opinion rooms: stance votes with short comments, "
            "AI topic-clustered summaries, and user-proposed hot topics. "
            "Reads are cached in-process; writes are rate limited per user."
        ),
        version="0.1.0",
        debug=settings.app.debug,
        lifespan=lifespan,
        license_info={
            "name": "MIT License",
            "url": "https://opensource.org/licenses/MIT",
        },
    )

    app.middleware("http")(request_id_middleware)

    setup_exception_handlers(app)

    app.include_router(rooms_router, prefix="/v1")
    app.include_router(hot_topics_router, prefix="/v1")
    app.include_router(matches_router, prefix="/v1")
    app.include_router(jobs_router, prefix="/v1")
    app.include_router(health_router)

    apply_openapi_customizations(app)

    return app
