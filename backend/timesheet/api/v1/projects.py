"""Project list endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from timesheet.api.deps import get_current_user, get_session
from timesheet.core.security import AuthenticatedUser
from timesheet.schemas.activity import ProjectListResponse
from timesheet.services.activity_service import ActivityService

router = APIRouter()


@router.get(
    "",
    response_model=ProjectListResponse,
    summary="Active projects",
)
async def list_projects(
    current_user: AuthenticatedUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> ProjectListResponse:
    """Return the active project labels in alphabetical order."""
    service = ActivityService(session)
    return ProjectListResponse(projects=await service.list_project_names())
