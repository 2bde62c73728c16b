"""FastAPI dependency injection module.

Bearer authentication, profile lookup, the manager role gate and the
Gemini client. Database sessions reuse ``timesheet.database.get_session``.
"""

from __future__ import annotations

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from timesheet.core.enums import Role
from timesheet.core.exceptions import AuthenticationError, AuthorizationError
from timesheet.core.security import AuthenticatedUser, user_from_token
from timesheet.database import get_session  # noqa: F401 – re-export for convenience
from timesheet.external.gemini_client import GeminiClient
from timesheet.models import Profile
from timesheet.services.profile_service import get_profile

# ---------------------------------------------------------------------------
# Bearer scheme
# ---------------------------------------------------------------------------
bearer_scheme = HTTPBearer(auto_error=False)


# ---------------------------------------------------------------------------
# Current user
# ---------------------------------------------------------------------------

async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> AuthenticatedUser:
    """Resolve the caller from the identity provider's bearer token.

    Raises:
        AuthenticationError: Missing or invalid token.
    """
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise AuthenticationError()

    try:
        return user_from_token(credentials.credentials)
    except JWTError:
        raise AuthenticationError()


async def get_current_profile(
    current_user: AuthenticatedUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> Profile | None:
    """Stored profile of the caller, None before profile completion."""
    return await get_profile(session, current_user.id)


async def require_manager(
    profile: Profile | None = Depends(get_current_profile),
) -> Profile:
    """Allow only callers whose profile has the manager role.

    Raises:
        AuthorizationError: No profile, or not a manager.
    """
    if profile is None or profile.role != Role.MANAGER.value:
        raise AuthorizationError()
    return profile


# ---------------------------------------------------------------------------
# External clients
# ---------------------------------------------------------------------------

def get_gemini_client() -> GeminiClient:
    """Gemini client for the request.

    Raises:
        AIServiceNotConfiguredError: No API key on this deployment.
    """
    return GeminiClient()
