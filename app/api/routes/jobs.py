from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Body, Depends

from app.api.deps import get_summary_service
from app.core.auth import verify_cron_secret
from app.schemas.rooms import SummarizeRequest
from app.services.summary_service import SummaryService

router = APIRouter(
    prefix="/jobs",
    tags=["Jobs"],
    dependencies=[Depends(verify_cron_secret)],
)


@router.api_route("/summarize", methods=["GET", "POST"])
async def summarize_room(
    service: Annotated[SummaryService, Depends(get_summary_service)],
    body: Annotated[SummarizeRequest | None, Body()] = None,
) -> dict:
    """Regenerate a room's summary from its latest votes.

    Meant for a scheduler. GET is accepted for schedulers that can only
    issue GET requests; it summarizes the default room.
    """
    request = body or SummarizeRequest()
    return await service.summarize_room(request.room_id, request.match_label)
