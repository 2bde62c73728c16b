"""Profile-related Pydantic schemas."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from timesheet.core.enums import Role


class MeResponse(BaseModel):
    """Identity and profile of the caller."""

    id: str
    email: str | None = None
    role: Role = Role.MEMBER
    full_name: str | None = None


class CompleteProfileRequest(BaseModel):
    """First-login profile completion."""

    model_config = ConfigDict(str_strip_whitespace=True)

    full_name: str = Field(..., min_length=1, max_length=255)
    role_wanted: Role = Role.MEMBER


class CompleteProfileResponse(BaseModel):
    """Result of profile completion."""

    ok: bool = True
    role: Role
