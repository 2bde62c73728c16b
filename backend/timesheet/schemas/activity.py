"""Activity-related Pydantic schemas.

Row input/output, day save requests, and the Month View projection.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from timesheet.config import settings
from timesheet.core.enums import ActivityType
from timesheet.services.normalizer import normalize_type


# ---------------------------------------------------------------------------
# Rows
# ---------------------------------------------------------------------------

class ActivityRowInput(BaseModel):
    """One row as submitted by a user (the day is carried by the request)."""

    ticket_id: str | None = Field(
        default=None,
        max_length=64,
        description="External ticket identifier",
    )
    subject: str = ""
    project: str = Field(default="", max_length=255)
    hours: float = Field(default=0, ge=0, le=24, description="Hours spent")
    # Missing types go through the validator too, so they get the
    # deployment's fallback.
    type: ActivityType = Field(default=None, validate_default=True)
    billing_code: str = Field(default="", max_length=64)

    @field_validator("type", mode="before")
    @classmethod
    def _normalize_type(cls, value: Any) -> ActivityType:
        return normalize_type(
            value,
            fallback=ActivityType(settings.ACTIVITY_TYPE_FALLBACK),
        )

    @field_validator("ticket_id", mode="before")
    @classmethod
    def _blank_ticket_to_none(cls, value: Any) -> Any:
        if value is None:
            return None
        text = str(value).strip()
        return text or None

    @field_validator("subject", "project", "billing_code", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value


class ActivityRow(ActivityRowInput):
    """Row with its day."""

    day: date


class ActivityRecord(ActivityRow):
    """Stored row as returned to managers."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: str


# ---------------------------------------------------------------------------
# Day
# ---------------------------------------------------------------------------

class SaveDayRequest(BaseModel):
    """Replace (or append to) the caller's rows for one day."""

    day: date
    rows: list[ActivityRowInput] = Field(default_factory=list)


class SaveDayResponse(BaseModel):
    """Result of a day save."""

    ok: bool = True
    inserted: int


class DayRowsResponse(BaseModel):
    """Rows stored for one day."""

    day: date
    rows: list[ActivityRow]


# ---------------------------------------------------------------------------
# Month View
# ---------------------------------------------------------------------------

DayStatus = Literal["weekend", "filled", "empty"]


class DayCell(BaseModel):
    """Aggregate of one calendar day."""

    day: date
    total_hours: float
    lines_count: int
    status: DayStatus


class MonthViewResponse(BaseModel):
    """Day-by-day projection of a month."""

    year: int
    month: int
    days: list[DayCell]


# ---------------------------------------------------------------------------
# Projects
# ---------------------------------------------------------------------------

class ProjectListResponse(BaseModel):
    """Active project labels."""

    projects: list[str]
