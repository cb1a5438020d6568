from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response

from app.api.deps import get_match_service
from app.schemas.matches import Match, MatchList, MatchStatus
from app.services.match_service import MatchService

router = APIRouter(prefix="/matches", tags=["Matches"])

MatchServiceDep = Annotated[MatchService, Depends(get_match_service)]


@router.get("", response_model=MatchList)
async def list_matches(
    service: MatchServiceDep,
    status: MatchStatus | None = None,
    limit: Annotated[int | None, Query(ge=1)] = None,
) -> dict:
    """Matches ordered by kickoff time, newest first (at most 50)."""
    return await service.list_matches(status=status, limit=limit)


@router.get("/{match_id}", response_model=Match)
async def get_match(
    match_id: str,
    response: Response,
    service: MatchServiceDep,
) -> dict:
    """A single match; cached for one minute while scores update live."""
    payload, hit = await service.get_match(match_id)
    response.headers["Cache-Control"] = "public, max-age=60"
    response.headers["X-Cache"] = "HIT" if hit else "MISS"
    return payload
