"""Stance votes and per-room vote threads.

Writes go straight to the store and then invalidate every cached view they
affect: the room summary and all vote-thread variants of the room.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from app.adapters.cache.base import AbstractCache
from app.adapters.store.base import AbstractStore
from app.core import cache_keys
from app.core.cache_keys import CacheTTL
from app.core.config import settings
from app.core.errors import ValidationAppError
from app.core.logging import hash_identifier

logger = logging.getLogger(__name__)

STANCES = ("support", "oppose", "neutral")

DEFAULT_THREAD_LIMIT = 50
MAX_THREAD_LIMIT = 100


def _validate_stance(stance: str) -> None:
    if stance not in STANCES:
        raise ValidationAppError(
            code="invalid_stance",
            message=f"Stance must be one of: {', '.join(STANCES)}",
            details={"allowed": list(STANCES)},
        )


def clamp_thread_limit(limit: int | None) -> int:
    if limit is None:
        return DEFAULT_THREAD_LIMIT
    return max(1, min(limit, MAX_THREAD_LIMIT))


class VoteService:
    """Submit stance votes and read them back as filtered threads."""

    def __init__(self, store: AbstractStore, cache: AbstractCache) -> None:
        self.store = store
        self.cache = cache

    async def submit_vote(
        self,
        room_id: str,
        user_id: str | None,
        stance: str,
        comment: str,
    ) -> dict[str, Any]:
        """Record a vote and drop cached views of the room.

        Raises:
            ValidationAppError: If the stance is unknown or the comment too long.
        """
        _validate_stance(stance)

        max_chars = settings.app.max_comment_chars
        if len(comment) > max_chars:
            raise ValidationAppError(
                code="comment_too_long",
                message="Comment too long",
                details={"max_chars": max_chars, "actual_chars": len(comment)},
            )

        await self.store.insert(
            "votes",
            {
                "room_id": room_id,
                "stance": stance,
                "comment": comment.strip(),
                "user_id": user_id,
            },
        )

        self.cache.delete(cache_keys.summary_key(room_id))
        removed = self.cache.invalidate_prefix(cache_keys.votes_room_prefix(room_id))

        logger.info(
            "vote.accepted",
            extra={
                "room_id": room_id,
                "stance": stance,
                "user_hash": hash_identifier(user_id) if user_id else None,
                "thread_pages_invalidated": removed,
            },
        )
        return {
            "accepted": True,
            "roomId": room_id,
            "receivedAt": datetime.now(timezone.utc).isoformat(),
        }

    async def list_thread(
        self,
        room_id: str,
        *,
        stance: str | None = None,
        topic: str | None = None,
        subtopic: str | None = None,
        limit: int | None = None,
    ) -> tuple[dict[str, Any], bool]:
        """Return the newest votes of a room, optionally filtered.

        The keyword filter is the subtopic when given, else the topic, and
        matches comments case-insensitively.

        Returns:
            Tuple of (payload, served_from_cache).
        """
        if stance is not None:
            _validate_stance(stance)
        limit = clamp_thread_limit(limit)

        key = cache_keys.votes_key(
            room_id,
            stance,
            topic=topic,
            subtopic=subtopic,
            # The default page size shares the plain key.
            limit=None if limit == DEFAULT_THREAD_LIMIT else limit,
        )
        cached = self.cache.get(key)
        if cached is not None:
            return cached, True

        keyword = subtopic or topic
        eq: dict[str, Any] = {"room_id": room_id}
        if stance:
            eq["stance"] = stance

        rows = await self.store.select(
            "votes",
            eq=eq,
            ilike=("comment", keyword) if keyword else None,
            order_by="created_at",
            descending=True,
            limit=limit,
        )

        payload = {
            "roomId": room_id,
            "stance": stance,
            "topic": topic,
            "subtopic": subtopic,
            "items": [
                {
                    "id": row["id"],
                    "stance": row["stance"],
                    "comment": row.get("comment", ""),
                    "createdAt": row.get("created_at"),
                }
                for row in rows
            ],
        }
        self.cache.set(key, payload, CacheTTL.VOTES)
        return payload, False
