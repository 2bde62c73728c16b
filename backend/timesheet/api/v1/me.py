"""Caller identity and profile-completion endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from timesheet.api.deps import get_current_profile, get_current_user, get_session
from timesheet.core.security import AuthenticatedUser
from timesheet.models import Profile
from timesheet.schemas.profile import (
    CompleteProfileRequest,
    CompleteProfileResponse,
    MeResponse,
)
from timesheet.services.profile_service import complete_profile, describe_me

router = APIRouter()


@router.get(
    "/me",
    response_model=MeResponse,
    summary="Current user",
)
async def get_me(
    current_user: AuthenticatedUser = Depends(get_current_user),
    profile: Profile | None = Depends(get_current_profile),
) -> MeResponse:
    """Return the caller's id, email, role and full name.

    ``full_name`` is null until the profile has been completed; clients use
    that to send the user to the completion page.
    """
    return describe_me(current_user, profile)


@router.post(
    "/profile/complete",
    response_model=CompleteProfileResponse,
    summary="Complete profile",
)
async def post_complete_profile(
    request: CompleteProfileRequest,
    current_user: AuthenticatedUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> CompleteProfileResponse:
    """Store the caller's full name and grant the requested role.

    The manager role is only granted to addresses on the allow-list.

    Args:
        request: Full name and wanted role.
        current_user: Verified caller.
        session: Database session.

    Returns:
        The role actually granted.
    """
    role = await complete_profile(session=session, user=current_user, request=request)
    return CompleteProfileResponse(role=role)
