"""AI parsing endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from timesheet.api.deps import get_current_user, get_gemini_client, get_session
from timesheet.core.security import AuthenticatedUser
from timesheet.external.gemini_client import GeminiClient
from timesheet.schemas.ai import AIParseRequest, AIParseResponse
from timesheet.services.activity_service import ActivityService
from timesheet.services.ai_parse_service import parse_day_text

router = APIRouter()


@router.post(
    "/parse",
    response_model=AIParseResponse,
    summary="Turn free text into rows",
)
async def parse(
    request: AIParseRequest,
    current_user: AuthenticatedUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
    client: GeminiClient = Depends(get_gemini_client),
) -> AIParseResponse:
    """Propose rows for ``request.day`` from a free-text description.

    Nothing is written; the client previews and edits the rows, then saves
    them through ``PUT /activities/day``. When ``known_projects`` is omitted
    the active projects are offered to the model.
    """
    known_projects = request.known_projects
    if known_projects is None:
        known_projects = await ActivityService(session).list_project_names()

    rows = await parse_day_text(
        client=client,
        text=request.text,
        day=request.day,
        known_projects=known_projects,
    )
    return AIParseResponse(rows=rows)
