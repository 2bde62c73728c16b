"""AI parsing Pydantic schemas."""

from __future__ import annotations

from datetime import date

from pydantic import BaseModel, Field

from timesheet.schemas.activity import ActivityRow


class AIParseRequest(BaseModel):
    """Free-text description of one day."""

    text: str = Field(..., min_length=1, max_length=5000)
    day: date
    known_projects: list[str] | None = Field(
        default=None,
        description="Project labels to pick from; active projects when omitted",
    )


class AIParseResponse(BaseModel):
    """Rows proposed for the day. Nothing is stored."""

    rows: list[ActivityRow]
