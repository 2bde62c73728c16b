"""Manager endpoints.

Team completion, monthly summary, per-user listings, corrections on behalf
of a user, billing-code edits and team exports. Every route requires the
manager role.
"""

from __future__ import annotations

from datetime import date
from typing import Literal
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from timesheet.api.deps import get_session, require_manager
from timesheet.api.responses import download_response
from timesheet.config import settings
from timesheet.core.exceptions import NotFoundError, ValidationError
from timesheet.models import Profile
from timesheet.schemas.activity import ActivityRecord, SaveDayResponse
from timesheet.schemas.pm import (
    BillingCodeUpdate,
    CompletionResponse,
    ManagerSaveDayRequest,
    MonthlySummaryStats,
    UserActivitiesResponse,
)
from timesheet.services.activity_service import ActivityService
from timesheet.services.aggregation import month_bounds
from timesheet.services.export import TEAM_HEADER, render, team_export_rows
from timesheet.services.pm_service import PmService
from timesheet.services.profile_service import get_profile, list_profiles

router = APIRouter()


def _check_range(date_from: date, date_to: date) -> None:
    if date_from > date_to:
        raise ValidationError("from must be on or before to")


# ---------------------------------------------------------------------------
# Completion / summary
# ---------------------------------------------------------------------------


@router.get(
    "/completion",
    response_model=CompletionResponse,
    summary="Team completion",
)
async def get_completion(
    date_from: date = Query(..., alias="from"),
    date_to: date = Query(..., alias="to"),
    manager: Profile = Depends(require_manager),
    session: AsyncSession = Depends(get_session),
) -> CompletionResponse:
    """Filled days and total hours of every profile over the range.

    Profiles without entries are listed with zeros.
    """
    _check_range(date_from, date_to)
    service = PmService(session)
    return await service.get_completion(date_from, date_to)


@router.get(
    "/summary",
    response_model=MonthlySummaryStats,
    summary="Monthly team summary",
)
async def get_monthly_summary(
    year: int = Query(..., ge=2000, le=2100),
    month: int = Query(..., ge=1, le=12),
    expected_days: int | None = Query(
        default=None,
        ge=0,
        le=31,
        description="Working days expected per user; weekdays of the month by default",
    ),
    manager: Profile = Depends(require_manager),
    session: AsyncSession = Depends(get_session),
) -> MonthlySummaryStats:
    """Per-user totals, under-filled flags, and breakdowns by type and project."""
    service = PmService(session)
    return await service.get_monthly_summary(
        year=year,
        month=month,
        expected_working_days=expected_days,
    )


# ---------------------------------------------------------------------------
# Activities
# ---------------------------------------------------------------------------


@router.get(
    "/activities",
    response_model=UserActivitiesResponse,
    summary="Rows of one user",
)
async def get_user_activities(
    user_id: UUID = Query(...),
    date_from: date = Query(..., alias="from"),
    date_to: date = Query(..., alias="to"),
    manager: Profile = Depends(require_manager),
    session: AsyncSession = Depends(get_session),
) -> UserActivitiesResponse:
    """Return one user's rows, with their ids, ordered by day."""
    _check_range(date_from, date_to)
    service = ActivityService(session)
    rows = await service.list_records(str(user_id), date_from, date_to)
    return UserActivitiesResponse(
        user_id=str(user_id),
        from_date=date_from,
        to_date=date_to,
        rows=rows,
    )


@router.put(
    "/activities/day",
    response_model=SaveDayResponse,
    summary="Replace a day for a user",
)
async def replace_day_for_user(
    request: ManagerSaveDayRequest,
    manager: Profile = Depends(require_manager),
    session: AsyncSession = Depends(get_session),
) -> SaveDayResponse:
    """Replace a user's day. The daily ceiling is not enforced here.

    Raises:
        NotFoundError: No profile with ``request.user_id``.
    """
    if await get_profile(session, request.user_id) is None:
        raise NotFoundError(f"Profile {request.user_id} not found")

    service = ActivityService(session)
    inserted = await service.replace_day(
        user_id=request.user_id,
        day=request.day,
        rows=request.rows,
        enforce_ceiling=False,
    )
    return SaveDayResponse(inserted=inserted)


@router.patch(
    "/activities/{activity_id}/billing-code",
    response_model=ActivityRecord,
    summary="Set a billing code",
)
async def update_billing_code(
    activity_id: int,
    request: BillingCodeUpdate,
    manager: Profile = Depends(require_manager),
    session: AsyncSession = Depends(get_session),
) -> ActivityRecord:
    """Update only the billing code of one stored row."""
    service = ActivityService(session)
    return await service.update_billing_code(activity_id, request.billing_code)


# ---------------------------------------------------------------------------
# Exports
# ---------------------------------------------------------------------------


async def _team_export(
    session: AsyncSession,
    date_from: date,
    date_to: date,
    export_format: Literal["csv", "xlsx"],
    user_id: str | None = None,
) -> bytes:
    profiles = await list_profiles(session)
    names_by_id = {p.id: p.display_name for p in profiles}

    activities = await ActivityService(session).list_activities(
        date_from,
        date_to,
        user_id=user_id,
    )
    rows = team_export_rows(
        activities,
        names_by_id,
        charge_unit=settings.EXPORT_CHARGE_UNIT,
        hours_per_day=settings.HOURS_PER_DAY,
    )
    return render(export_format, TEAM_HEADER, rows, title="Team activities")


@router.get(
    "/export",
    summary="Export one month for the team",
    response_class=Response,
)
async def export_month(
    year: int = Query(..., ge=2000, le=2100),
    month: int = Query(..., ge=1, le=12),
    format: Literal["csv", "xlsx"] = Query(default="csv"),
    manager: Profile = Depends(require_manager),
    session: AsyncSession = Depends(get_session),
) -> Response:
    """Download every user's rows of one month, with full names."""
    start, end = month_bounds(year, month)
    content = await _team_export(session, start, end, format)
    return download_response(content, format, f"activities_team_{year}-{month:02d}")


@router.get(
    "/export-range",
    summary="Export a date range for the team",
    response_class=Response,
)
async def export_range(
    date_from: date = Query(..., alias="from"),
    date_to: date = Query(..., alias="to"),
    user_id: UUID | None = Query(default=None),
    format: Literal["csv", "xlsx"] = Query(default="csv"),
    manager: Profile = Depends(require_manager),
    session: AsyncSession = Depends(get_session),
) -> Response:
    """Download rows over a range, optionally restricted to one user."""
    _check_range(date_from, date_to)
    owner = str(user_id) if user_id is not None else None
    content = await _team_export(session, date_from, date_to, format, user_id=owner)
    stem = f"activities_team_{date_from.isoformat()}_to_{date_to.isoformat()}"
    if owner:
        stem += f"_{owner}"
    return download_response(content, format, stem)
