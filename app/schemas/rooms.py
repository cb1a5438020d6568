"""Pydantic schemas for room votes, vote threads and AI summaries.

Wire format is camelCase; Python attributes stay snake_case.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

Stance = Literal["support", "oppose", "neutral"]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class VoteRequest(CamelModel):
    """A stance plus a short free-text comment."""

    stance: Stance
    comment: str = Field(
        ...,
        description="Short opinion text (trimmed; length limited by APP_MAX_COMMENT_CHARS).",
    )


class VoteAccepted(CamelModel):
    accepted: bool = True
    room_id: str
    received_at: str


class ThreadItem(CamelModel):
    id: str
    stance: Stance
    comment: str
    created_at: str | None = None


class ThreadResponse(CamelModel):
    room_id: str
    stance: Stance | None = None
    topic: str | None = None
    subtopic: str | None = None
    items: list[ThreadItem] = Field(default_factory=list)


class TopicCounts(CamelModel):
    support: int = 0
    oppose: int = 0
    neutral: int = 0


class TopicSummary(CamelModel):
    """One topic cluster with per-stance counts and summaries."""

    id: str
    title: str
    counts: TopicCounts
    support_summary: str = ""
    oppose_summary: str = ""
    neutral_summary: str = ""


class RoomSummary(CamelModel):
    """Latest topic-clustered summary of a room's votes."""

    room_id: str
    match_label: str
    updated_at: str
    batch_policy: str
    topics: list[TopicSummary] = Field(default_factory=list)


class SummarizeRequest(CamelModel):
    room_id: str = "default"
    match_label: str | None = None
