from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Response

from app.api.deps import get_hot_topic_service
from app.core.auth import require_user
from app.core.rate_limit import HOT_TOPIC_CREATE, HOT_TOPIC_VOTE, rate_limited
from app.schemas.hot_topics import (
    CreateHotTopicRequest,
    CreateHotTopicResponse,
    HotTopicList,
    HotTopicVoteRequest,
    HotTopicVoteResponse,
)
from app.services.hot_topic_service import HotTopicService

router = APIRouter(prefix="/rooms/{room_id}/hot-topics", tags=["Hot Topics"])

HotTopicServiceDep = Annotated[HotTopicService, Depends(get_hot_topic_service)]


@router.get("", response_model=HotTopicList)
async def list_hot_topics(
    room_id: str,
    response: Response,
    service: HotTopicServiceDep,
) -> dict:
    """Top three active hot topics of the room by vote velocity."""
    payload, hit = await service.list_top(room_id)
    response.headers["Cache-Control"] = "public, max-age=30"
    response.headers["X-Cache"] = "HIT" if hit else "MISS"
    return payload


@router.post(
    "",
    response_model=CreateHotTopicResponse,
    dependencies=[Depends(require_user), Depends(rate_limited(HOT_TOPIC_CREATE))],
)
async def create_hot_topic(
    room_id: str,
    body: CreateHotTopicRequest,
    service: HotTopicServiceDep,
) -> dict:
    """Propose a yes/no question for the room."""
    topic = await service.create_topic(room_id, body.topic_text)
    return {"ok": True, "topic": topic}


@router.post(
    "/{topic_id}/vote",
    response_model=HotTopicVoteResponse,
    dependencies=[Depends(require_user), Depends(rate_limited(HOT_TOPIC_VOTE))],
)
async def vote_hot_topic(
    room_id: str,
    topic_id: str,
    body: HotTopicVoteRequest,
    user_id: Annotated[str, Depends(require_user)],
    service: HotTopicServiceDep,
) -> dict:
    """Vote yes/no on a hot topic; a repeat vote replaces the previous one."""
    return await service.vote(room_id, topic_id, user_id, body.vote, body.reason)
