"""Activity endpoints for the calling user.

Day read/replace/append, Month View, and monthly export.
"""

from __future__ import annotations

from datetime import date
from typing import Literal

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from timesheet.api.deps import get_current_user, get_session
from timesheet.api.responses import download_response
from timesheet.config import settings
from timesheet.core.security import AuthenticatedUser
from timesheet.schemas.activity import (
    DayRowsResponse,
    MonthViewResponse,
    SaveDayRequest,
    SaveDayResponse,
)
from timesheet.services.activity_service import ActivityService
from timesheet.services.aggregation import month_bounds
from timesheet.services.export import MEMBER_HEADER, member_export_rows, render

router = APIRouter()


# ---------------------------------------------------------------------------
# Day
# ---------------------------------------------------------------------------


@router.get(
    "/day",
    response_model=DayRowsResponse,
    summary="Rows of one day",
)
async def get_day(
    day: date = Query(..., description="Day (YYYY-MM-DD)"),
    current_user: AuthenticatedUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> DayRowsResponse:
    """Return the caller's rows for ``day`` in the order they were saved."""
    service = ActivityService(session)
    rows = await service.get_day(user_id=current_user.id, day=day)
    return DayRowsResponse(day=day, rows=rows)


@router.put(
    "/day",
    response_model=SaveDayResponse,
    summary="Replace one day",
)
async def replace_day(
    request: SaveDayRequest,
    current_user: AuthenticatedUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> SaveDayResponse:
    """Replace every row of the caller's day with ``request.rows``.

    The total must stay within the daily ceiling. Sending an empty list
    clears the day.
    """
    service = ActivityService(session)
    inserted = await service.replace_day(
        user_id=current_user.id,
        day=request.day,
        rows=request.rows,
    )
    return SaveDayResponse(inserted=inserted)


@router.post(
    "/day/append",
    response_model=SaveDayResponse,
    summary="Append rows to one day",
)
async def append_day(
    request: SaveDayRequest,
    current_user: AuthenticatedUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> SaveDayResponse:
    """Add rows to the caller's day without deleting the stored ones."""
    service = ActivityService(session)
    inserted = await service.append_day(
        user_id=current_user.id,
        day=request.day,
        rows=request.rows,
    )
    return SaveDayResponse(inserted=inserted)


# ---------------------------------------------------------------------------
# Month
# ---------------------------------------------------------------------------


@router.get(
    "/month",
    response_model=MonthViewResponse,
    summary="Month View",
)
async def get_month(
    year: int = Query(..., ge=2000, le=2100),
    month: int = Query(..., ge=1, le=12),
    current_user: AuthenticatedUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> MonthViewResponse:
    """Return one cell per day of the month with totals and status."""
    service = ActivityService(session)
    return await service.get_month_view(
        user_id=current_user.id,
        year=year,
        month=month,
    )


@router.get(
    "/export",
    summary="Export one month",
    response_class=Response,
)
async def export_month(
    year: int = Query(..., ge=2000, le=2100),
    month: int = Query(..., ge=1, le=12),
    format: Literal["csv", "xlsx"] = Query(default="csv"),
    current_user: AuthenticatedUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> Response:
    """Download the caller's rows for one month as CSV or XLSX."""
    start, end = month_bounds(year, month)
    service = ActivityService(session)
    activities = await service.list_activities(start, end, user_id=current_user.id)

    rows = member_export_rows(
        activities,
        charge_unit=settings.EXPORT_CHARGE_UNIT,
        hours_per_day=settings.HOURS_PER_DAY,
    )
    content = render(format, MEMBER_HEADER, rows, title=f"{year}-{month:02d}")
    return download_response(content, format, f"activities_{year}-{month:02d}")
