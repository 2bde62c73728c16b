"""Profile service module.

Profile lookup, team listing, and the profile-completion step that is also
the only way to obtain the manager role.
"""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from timesheet.config import settings
from timesheet.core.enums import Role
from timesheet.core.exceptions import AuthorizationError
from timesheet.core.security import AuthenticatedUser
from timesheet.models import Profile
from timesheet.schemas.profile import CompleteProfileRequest, MeResponse

logger = logging.getLogger(__name__)


async def get_profile(session: AsyncSession, user_id: str) -> Profile | None:
    """Return the profile of ``user_id``, or None before completion."""
    stmt = select(Profile).where(Profile.id == user_id)
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def list_profiles(session: AsyncSession) -> list[Profile]:
    """Return every profile ordered by name."""
    stmt = select(Profile).order_by(Profile.full_name, Profile.id)
    result = await session.execute(stmt)
    return list(result.scalars().all())


def describe_me(user: AuthenticatedUser, profile: Profile | None) -> MeResponse:
    """Combine the token identity with the stored profile."""
    if profile is None:
        return MeResponse(id=user.id, email=user.email)
    return MeResponse(
        id=user.id,
        email=user.email or profile.email,
        role=Role(profile.role),
        full_name=profile.full_name,
    )


def is_allowed_email_domain(email: str | None) -> bool:
    """Check ``email`` against ``ALLOWED_EMAIL_DOMAINS`` (empty list = any)."""
    domains = settings.allowed_email_domains
    if not domains:
        return True
    if not email or "@" not in email:
        return False
    return email.rsplit("@", 1)[1].lower() in domains


def is_manager_allowed(user: AuthenticatedUser) -> bool:
    """Whether ``user`` is on the manager allow-list (email or id)."""
    allowed = settings.manager_allowed_emails
    candidates = {user.id.lower()}
    if user.email:
        candidates.add(user.email.lower())
    return any(c in allowed for c in candidates)


async def complete_profile(
    session: AsyncSession,
    user: AuthenticatedUser,
    request: CompleteProfileRequest,
) -> Role:
    """Create or update the caller's profile.

    Args:
        session: Database session.
        user: Verified caller.
        request: Full name and wanted role.

    Returns:
        The role granted.

    Raises:
        AuthorizationError: Email domain not allowed, or manager role asked
            by someone outside the allow-list.
    """
    if not is_allowed_email_domain(user.email):
        raise AuthorizationError("Email domain not allowed")

    final_role = Role.MEMBER
    if request.role_wanted == Role.MANAGER:
        if not is_manager_allowed(user):
            raise AuthorizationError("Not allowed to take the manager role")
        final_role = Role.MANAGER

    profile = await get_profile(session, user.id)
    if profile is None:
        profile = Profile(
            id=user.id,
            email=user.email,
            full_name=request.full_name,
            role=final_role.value,
        )
        session.add(profile)
    else:
        profile.full_name = request.full_name
        profile.email = user.email or profile.email
        if profile.role != final_role.value:
            logger.info(
                "Role change for user=%s: %s -> %s",
                user.id,
                profile.role,
                final_role.value,
            )
        profile.role = final_role.value

    await session.commit()
    logger.info("Profile completed for user=%s role=%s", user.id, final_role.value)
    return final_role
