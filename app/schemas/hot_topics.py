"""Pydantic schemas for hot topics (user-proposed yes/no questions)."""

from __future__ import annotations

from pydantic import BaseModel, Field

from app.schemas.rooms import CamelModel


class HotTopic(BaseModel):
    """A hot topic row as stored; counts are refreshed on every vote."""

    id: str
    room_id: str
    topic_text: str
    yes_count: int = 0
    no_count: int = 0
    velocity_score: float = Field(0.0, description="Votes per minute over the last 5 minutes.")
    is_active: bool = True
    created_at: str | None = None
    updated_at: str | None = None


class HotTopicList(CamelModel):
    room_id: str
    topics: list[HotTopic] = Field(default_factory=list)


class CreateHotTopicRequest(CamelModel):
    topic_text: str


class CreateHotTopicResponse(CamelModel):
    ok: bool = True
    topic: HotTopic


class HotTopicVoteRequest(CamelModel):
    vote: bool = Field(..., description="true for yes, false for no")
    reason: str | None = None


class HotTopicVoteResponse(CamelModel):
    ok: bool = True
    yes_count: int
    no_count: int
    velocity_score: float
