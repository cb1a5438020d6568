"""Hot topics: user-proposed yes/no questions ranked by vote velocity."""

from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from typing import Any, Callable

from app.adapters.cache.base import AbstractCache
from app.adapters.store.base import AbstractStore
from app.core import cache_keys
from app.core.cache_keys import CacheTTL
from app.core.config import settings
from app.core.errors import NotFoundAppError, ValidationAppError
from app.core.logging import hash_identifier

logger = logging.getLogger(__name__)

TOP_TOPICS = 3
VELOCITY_WINDOW_MINUTES = 5


def _iso(timestamp: float) -> str:
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).isoformat(timespec="microseconds")


class HotTopicService:
    """Create, rank and vote on a room's hot topics."""

    def __init__(
        self,
        store: AbstractStore,
        cache: AbstractCache,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.store = store
        self.cache = cache
        self._clock = clock

    async def list_top(self, room_id: str) -> tuple[dict[str, Any], bool]:
        """Return the active topics with the highest velocity.

        Returns:
            Tuple of (payload, served_from_cache).
        """
        key = cache_keys.hot_topics_key(room_id)
        cached = self.cache.get(key)
        if cached is not None:
            return cached, True

        rows = await self.store.select(
            "hot_topics",
            eq={"room_id": room_id, "is_active": True},
            order_by="velocity_score",
            descending=True,
            limit=TOP_TOPICS,
        )
        payload = {"roomId": room_id, "topics": rows}
        self.cache.set(key, payload, CacheTTL.HOT_TOPICS)
        return payload, False

    async def create_topic(self, room_id: str, topic_text: str) -> dict[str, Any]:
        """Open a new yes/no question in a room.

        Raises:
            ValidationAppError: If the text is empty or too long.
        """
        text = topic_text.strip()
        max_chars = settings.app.max_topic_chars
        if not text or len(text) > max_chars:
            raise ValidationAppError(
                code="invalid_topic_text",
                message=f"Invalid topic text (max {max_chars} characters)",
                details={"max_chars": max_chars, "actual_chars": len(text)},
            )

        topic = await self.store.insert(
            "hot_topics",
            {
                "room_id": room_id,
                "topic_text": text,
                "yes_count": 0,
                "no_count": 0,
                "velocity_score": 0.0,
                "is_active": True,
            },
        )
        self.cache.delete(cache_keys.hot_topics_key(room_id))

        logger.info("hot_topic.created", extra={"room_id": room_id, "topic_id": topic["id"]})
        return topic

    async def vote(
        self,
        room_id: str,
        topic_id: str,
        user_id: str,
        vote: bool,
        reason: str | None = None,
    ) -> dict[str, Any]:
        """Record (or replace) a user's yes/no vote and refresh the topic's tallies.

        Velocity is the number of votes cast in the last five minutes divided
        by five, i.e. votes per minute.

        Raises:
            ValidationAppError: If the reason is too long or the topic is closed.
            NotFoundAppError: If the topic doesn't exist in this room.
        """
        max_chars = settings.app.max_reason_chars
        if reason and len(reason) > max_chars:
            raise ValidationAppError(
                code="reason_too_long",
                message=f"Reason too long (max {max_chars} characters)",
                details={"max_chars": max_chars, "actual_chars": len(reason)},
            )

        topics = await self.store.select("hot_topics", eq={"id": topic_id, "room_id": room_id}, limit=1)
        if not topics:
            raise NotFoundAppError(
                code="hot_topic_not_found",
                message="Hot topic not found",
                details={"room_id": room_id, "topic_id": topic_id},
            )
        if not topics[0].get("is_active", True):
            raise ValidationAppError(
                code="hot_topic_closed",
                message="Hot topic is no longer accepting votes",
                details={"topic_id": topic_id},
            )

        await self.store.upsert(
            "hot_topic_votes",
            {
                "hot_topic_id": topic_id,
                "user_id": user_id,
                "vote": vote,
                "reason": reason.strip() if reason and reason.strip() else None,
            },
            on_conflict=("hot_topic_id", "user_id"),
        )

        votes = await self.store.select("hot_topic_votes", eq={"hot_topic_id": topic_id})
        yes_count = sum(1 for v in votes if v.get("vote"))
        no_count = len(votes) - yes_count

        now = self._clock()
        recent = await self.store.select(
            "hot_topic_votes",
            eq={"hot_topic_id": topic_id},
            gte=("created_at", _iso(now - VELOCITY_WINDOW_MINUTES * 60)),
        )
        velocity_score = len(recent) / VELOCITY_WINDOW_MINUTES

        await self.store.update(
            "hot_topics",
            {
                "yes_count": yes_count,
                "no_count": no_count,
                "velocity_score": velocity_score,
                "updated_at": _iso(now),
            },
            eq={"id": topic_id},
        )
        self.cache.delete(cache_keys.hot_topics_key(room_id))

        logger.info(
            "hot_topic.voted",
            extra={
                "room_id": room_id,
                "topic_id": topic_id,
                "user_hash": hash_identifier(user_id),
                "velocity_score": velocity_score,
            },
        )
        return {
            "ok": True,
            "yesCount": yes_count,
            "noCount": no_count,
            "velocityScore": velocity_score,
        }
