"""Match lookups for the room header and match picker."""

from __future__ import annotations

from typing import Any

from app.adapters.cache.base import AbstractCache
from app.adapters.store.base import AbstractStore
from app.core import cache_keys
from app.core.cache_keys import CacheTTL
from app.core.errors import NotFoundAppError

DEFAULT_MATCH_LIMIT = 20
MAX_MATCH_LIMIT = 50


class MatchService:
    def __init__(self, store: AbstractStore, cache: AbstractCache) -> None:
        self.store = store
        self.cache = cache

    async def get_match(self, match_id: str) -> tuple[dict[str, Any], bool]:
        """Return one match, cached briefly since scores change live.

        Raises:
            NotFoundAppError: If no match has this id.
        """
        key = cache_keys.match_key(match_id)
        cached = self.cache.get(key)
        if cached is not None:
            return cached, True

        rows = await self.store.select("matches", eq={"id": match_id}, limit=1)
        if not rows:
            raise NotFoundAppError(
                code="match_not_found",
                message="Match not found",
                details={"match_id": match_id},
            )

        self.cache.set(key, rows[0], CacheTTL.MATCH)
        return rows[0], False

    async def list_matches(self, status: str | None = None, limit: int | None = None) -> dict[str, Any]:
        limit = max(1, min(limit or DEFAULT_MATCH_LIMIT, MAX_MATCH_LIMIT))
        rows = await self.store.select(
            "matches",
            eq={"status": status} if status else None,
            order_by="kickoff_time",
            descending=True,
            limit=limit,
        )
        return {"matches": rows, "count": len(rows)}
