"""Manager dashboard Pydantic schemas.

Completion summary, monthly summary statistics, per-user activity
listings and manager-side writes.
"""

from __future__ import annotations

from datetime import date
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from timesheet.schemas.activity import ActivityRecord, SaveDayRequest


# ---------------------------------------------------------------------------
# Completion
# ---------------------------------------------------------------------------

class UserCompletion(BaseModel):
    """Filled days and hours of one user over a date range."""

    user_id: str
    name: str
    role: str | None = None
    filled_days: int
    total_hours: float


class CompletionResponse(BaseModel):
    """Team completion over ``[from_date, to_date]``."""

    from_date: date
    to_date: date
    users: list[UserCompletion]


# ---------------------------------------------------------------------------
# Monthly summary
# ---------------------------------------------------------------------------

class BreakdownItem(BaseModel):
    """Share of the period's hours spent on one label."""

    label: str
    hours: float
    percentage: int = Field(..., ge=0, le=100)


class UserMonthlyStats(UserCompletion):
    """Per-user line of the monthly summary."""

    day_equivalents: float
    below_expected: bool


class MonthlySummaryStats(BaseModel):
    """Team-wide statistics over a period."""

    from_date: date
    to_date: date
    expected_working_days: int
    total_hours: float
    total_day_equivalents: float
    users: list[UserMonthlyStats]
    by_type: list[BreakdownItem]
    by_project: list[BreakdownItem]


# ---------------------------------------------------------------------------
# Activities
# ---------------------------------------------------------------------------

class UserActivitiesResponse(BaseModel):
    """Rows of one user over a date range."""

    user_id: str
    from_date: date
    to_date: date
    rows: list[ActivityRecord]


class ManagerSaveDayRequest(SaveDayRequest):
    """Replace a day on behalf of another user."""

    user_id: str = Field(..., description="Profile id (UUID)")

    @field_validator("user_id", mode="before")
    @classmethod
    def _canonical_uuid(cls, value: Any) -> str:
        # Raises ValueError (reported as 400) for anything but a UUID.
        return str(UUID(str(value).strip()))


class BillingCodeUpdate(BaseModel):
    """New billing code for one stored row."""

    billing_code: str = Field(..., max_length=64)
