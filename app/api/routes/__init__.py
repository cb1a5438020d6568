from __future__ import annotations

from app.api.routes.health import router as health_router
from app.api.routes.hot_topics import router as hot_topics_router
from app.api.routes.jobs import router as jobs_router
from app.api.routes.matches import router as matches_router
from app.api.routes.rooms import router as rooms_router

__all__ = [
    "health_router",
    "hot_topics_router",
    "jobs_router",
    "matches_router",
    "rooms_router",
]
