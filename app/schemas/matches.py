"""Pydantic schemas for match lookups."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

MatchStatus = Literal["SCHEDULED", "LIVE", "FINISHED"]


class Match(BaseModel):
    """A match row; columns beyond the known ones are passed through."""

    model_config = ConfigDict(extra="allow")

    id: str
    status: str | None = None
    home_team: str | None = None
    away_team: str | None = None
    home_score: int | None = None
    away_score: int | None = None
    kickoff_time: str | None = None


class MatchList(BaseModel):
    matches: list[Match] = Field(default_factory=list)
    count: int = 0
