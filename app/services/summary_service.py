"""Room summaries: AI topic clustering of recent votes.

The summarizer job asks the LLM to group a room's latest votes into topics
with per-stance counts and short summaries, salvages JSON from whatever text
comes back, normalizes it, and stores it as the room's "live" snapshot. Reads
serve the newest snapshot through the cache.
"""

from __future__ import annotations

import json
import logging
import math
import re
from datetime import datetime, timezone
from typing import Any

from app.adapters.cache.base import AbstractCache
from app.adapters.llm.base import AbstractLLMClient
from app.adapters.store.base import AbstractStore
from app.core import cache_keys
from app.core.cache_keys import CacheTTL
from app.core.errors import LLMAppError

logger = logging.getLogger(__name__)

LIVE_SNAPSHOT = "live"
MAX_VOTES_PER_SUMMARY = 200
MAX_TOPICS = 5
DEFAULT_ROOM_ID = "default"
DEFAULT_MATCH_LABEL = "TBD: next featured match"
DEFAULT_BATCH_POLICY = "Every 5 minutes / every 10 votes"

SYSTEM_PROMPT = (
    "You summarize football match opinions into topic clusters. "
    "Return concise summaries. Output raw JSON only, no code fences."
)

_JSON_FENCE = re.compile(r"```json\s*(.*?)\s*```", re.IGNORECASE | re.DOTALL)
_ANY_FENCE = re.compile(r"```\s*(.*?)\s*```", re.DOTALL)


def build_prompt(votes: list[dict[str, Any]]) -> str:
    """Build the clustering prompt for a batch of votes.

    Only stance and comment are sent; user identifiers never leave the service.
    """
    compact = [{"stance": v.get("stance"), "comment": v.get("comment", "")} for v in votes]
    return (
        f"Votes: {json.dumps(compact, ensure_ascii=False)}\n\n"
        f"Create up to {MAX_TOPICS} topics. For each topic, group relevant votes and "
        "count support/oppose/neutral. Provide 2-3 short sentences for each stance "
        "(support/oppose/neutral). Return JSON of the form "
        '{"batchPolicy": str, "topics": [{"id": str, "title": str, '
        '"counts": {"support": int, "oppose": int, "neutral": int}, '
        '"supportSummary": str, "opposeSummary": str, "neutralSummary": str}]}.'
    )


def extract_json(text: str) -> str:
    """Pull the JSON document out of model output.

    Tries, in order: a ```json fence, any ``` fence, the span from the first
    ``{`` to the last ``}``. Falls back to the text unchanged.
    """
    for pattern in (_JSON_FENCE, _ANY_FENCE):
        match = pattern.search(text)
        if match and match.group(1):
            return match.group(1)

    first, last = text.find("{"), text.rfind("}")
    if first != -1 and last > first:
        return text[first : last + 1]
    return text


def _count(value: Any) -> int:
    try:
        number = float(value or 0)
    except (TypeError, ValueError):
        return 0
    # Infinity, 1e400 and NaN all count as zero.
    if not math.isfinite(number):
        return 0
    return int(number)


def _sentences(value: Any) -> str:
    if isinstance(value, list):
        return " ".join(str(v) for v in value)
    return "" if value is None else str(value)


def normalize_topics(raw: Any) -> list[dict[str, Any]]:
    """Coerce model output into at most MAX_TOPICS topic summaries.

    Two shapes are accepted per topic: the requested flat shape
    (``title``/``counts``/``*Summary``), or a nested one
    (``topic``/``votes``/``summary.{support,oppose,neutral}``) whose
    summaries may be lists of sentences.
    """
    topics = raw.get("topics") if isinstance(raw, dict) else None
    if not isinstance(topics, list):
        return []

    normalized: list[dict[str, Any]] = []
    for index, topic in enumerate(topics[:MAX_TOPICS]):
        if not isinstance(topic, dict):
            topic = {}
        topic_id = str(topic.get("id") or f"topic-{index + 1}")

        counts = topic.get("counts")
        if isinstance(counts, dict) and topic.get("title"):
            normalized.append(
                {
                    "id": topic_id,
                    "title": str(topic["title"]),
                    "counts": {stance: _count(counts.get(stance)) for stance in ("support", "oppose", "neutral")},
                    "supportSummary": _sentences(topic.get("supportSummary")),
                    "opposeSummary": _sentences(topic.get("opposeSummary")),
                    "neutralSummary": _sentences(topic.get("neutralSummary")),
                }
            )
            continue

        votes = topic.get("votes") if isinstance(topic.get("votes"), dict) else {}
        block = topic.get("summary") if isinstance(topic.get("summary"), dict) else {}
        normalized.append(
            {
                "id": topic_id,
                "title": str(topic.get("topic") or topic.get("title") or f"Topic {index + 1}"),
                "counts": {stance: _count(votes.get(stance)) for stance in ("support", "oppose", "neutral")},
                "supportSummary": _sentences(block.get("support")),
                "opposeSummary": _sentences(block.get("oppose")),
                "neutralSummary": _sentences(block.get("neutral")),
            }
        )
    return normalized


def placeholder_summary(room_id: str) -> dict[str, Any]:
    """Summary served before the summarizer has produced a snapshot."""
    return {
        "roomId": room_id,
        "matchLabel": DEFAULT_MATCH_LABEL,
        "updatedAt": datetime.now(timezone.utc).isoformat(),
        "batchPolicy": DEFAULT_BATCH_POLICY,
        "topics": [],
    }


class SummaryService:
    """Read and regenerate topic-clustered room summaries."""

    def __init__(
        self,
        store: AbstractStore,
        cache: AbstractCache,
        llm: AbstractLLMClient | None = None,
    ) -> None:
        self.store = store
        self.cache = cache
        self.llm = llm

    async def get_summary(self, room_id: str) -> tuple[dict[str, Any], bool]:
        """Return the room's latest summary.

        Returns:
            Tuple of (payload, served_from_cache).
        """
        key = cache_keys.summary_key(room_id)
        cached = self.cache.get(key)
        if cached is not None:
            return cached, True

        rows = await self.store.select(
            "summaries",
            eq={"room_id": room_id, "snapshot": LIVE_SNAPSHOT},
            order_by="created_at",
            descending=True,
            limit=1,
        )

        if not rows or not rows[0].get("payload"):
            payload = placeholder_summary(room_id)
        else:
            row = rows[0]
            payload = {
                **row["payload"],
                "roomId": room_id,
                "updatedAt": row.get("created_at") or datetime.now(timezone.utc).isoformat(),
            }

        self.cache.set(key, payload, CacheTTL.SUMMARY)
        return payload, False

    async def summarize_room(
        self,
        room_id: str = DEFAULT_ROOM_ID,
        match_label: str | None = None,
    ) -> dict[str, Any]:
        """Cluster the room's newest votes and store a live snapshot.

        Raises:
            LLMAppError: If no LLM is configured, the call fails, or its
                output can't be parsed as JSON.
        """
        if self.llm is None:
            raise LLMAppError(
                code="llm_not_configured",
                message="LLM_API_KEY not configured",
            )

        votes = await self.store.select(
            "votes",
            eq={"room_id": room_id},
            order_by="created_at",
            descending=True,
            limit=MAX_VOTES_PER_SUMMARY,
        )
        if not votes:
            return {"ok": True, "roomId": room_id, "note": "No votes to summarize"}

        try:
            output = await self.llm.generate_text(build_prompt(votes), system=SYSTEM_PROMPT)
        except RuntimeError as exc:
            raise LLMAppError(code="llm_request_failed", message=str(exc)) from exc

        try:
            parsed = json.loads(extract_json(output))
        except json.JSONDecodeError as exc:
            logger.warning(
                "summary.parse_failed",
                extra={"room_id": room_id, "output_chars": len(output), "raw_output": output},
            )
            raise LLMAppError(
                code="summary_parse_failed",
                message="Failed to parse summary JSON",
                details={"room_id": room_id},
            ) from exc

        batch_policy = parsed.get("batchPolicy") if isinstance(parsed, dict) else None
        payload = {
            "matchLabel": match_label or DEFAULT_MATCH_LABEL,
            "updatedAt": datetime.now(timezone.utc).isoformat(),
            "batchPolicy": batch_policy or DEFAULT_BATCH_POLICY,
            "topics": normalize_topics(parsed),
        }

        await self.store.insert(
            "summaries",
            {"room_id": room_id, "snapshot": LIVE_SNAPSHOT, "payload": payload},
        )
        self.cache.delete(cache_keys.summary_key(room_id))

        logger.info(
            "summary.stored",
            extra={"room_id": room_id, "votes": len(votes), "topics": len(payload["topics"])},
        )
        return {"ok": True, "roomId": room_id, "payload": payload}
