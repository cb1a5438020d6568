from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response

from app.api.deps import get_summary_service, get_vote_service
from app.core.auth import voter_identity
from app.core.rate_limit import VOTE, rate_limited
from app.schemas.rooms import RoomSummary, Stance, ThreadResponse, VoteAccepted, VoteRequest
from app.services.summary_service import SummaryService
from app.services.vote_service import VoteService

router = APIRouter(prefix="/rooms/{room_id}", tags=["Rooms"])


def cache_status(hit: bool) -> str:
    return "HIT" if hit else "MISS"


@router.get("/summary", response_model=RoomSummary)
async def get_room_summary(
    room_id: str,
    response: Response,
    service: Annotated[SummaryService, Depends(get_summary_service)],
) -> dict:
    """Latest topic-clustered summary of the room's votes.

    Served from cache for up to five minutes; a room without a stored
    snapshot gets a placeholder summary with no topics.
    """
    payload, hit = await service.get_summary(room_id)

    response.headers["Cache-Control"] = "public, max-age=300, stale-while-revalidate=60"
    response.headers["X-Cache"] = cache_status(hit)
    if payload.get("updatedAt"):
        response.headers["X-Updated-At"] = payload["updatedAt"]
    return payload


@router.post(
    "/votes",
    response_model=VoteAccepted,
    dependencies=[Depends(voter_identity), Depends(rate_limited(VOTE))],
)
async def submit_vote(
    room_id: str,
    body: VoteRequest,
    user_id: Annotated[str | None, Depends(voter_identity)],
    service: Annotated[VoteService, Depends(get_vote_service)],
) -> dict:
    """Cast a stance vote with a short comment.

    Invalidates the room summary and every cached vote thread of the room.
    """
    return await service.submit_vote(room_id, user_id, body.stance, body.comment)


@router.get("/threads", response_model=ThreadResponse)
async def get_vote_thread(
    room_id: str,
    response: Response,
    service: Annotated[VoteService, Depends(get_vote_service)],
    stance: Stance | None = None,
    topic: str | None = None,
    subtopic: str | None = None,
    limit: Annotated[int | None, Query(ge=1)] = None,
) -> dict:
    """Newest votes of the room, filterable by stance and keyword."""
    payload, hit = await service.list_thread(
        room_id,
        stance=stance,
        topic=topic,
        subtopic=subtopic,
        limit=limit,
    )
    response.headers["X-Cache"] = cache_status(hit)
    return payload
