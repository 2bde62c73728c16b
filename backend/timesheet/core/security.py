"""Bearer token verification for the hosted identity provider.

The identity provider signs its access tokens with a shared HS256 secret;
python-jose decodes and validates them (signature, expiry, audience).
"""

from __future__ import annotations

from dataclasses import dataclass

from jose import JWTError, jwt

from timesheet.config import settings


@dataclass(frozen=True)
class AuthenticatedUser:
    """Identity extracted from a verified bearer token."""

    id: str
    email: str | None = None


def verify_token(token: str) -> dict:
    """Verify a JWT and return its payload.

    Args:
        token: Raw JWT string (without the ``Bearer`` prefix).

    Returns:
        Decoded payload dict.

    Raises:
        JWTError: Invalid signature, expired, wrong audience or no subject.
    """
    payload: dict = jwt.decode(
        token,
        settings.AUTH_JWT_SECRET,
        algorithms=[settings.AUTH_JWT_ALGORITHM],
        audience=settings.AUTH_JWT_AUDIENCE,
    )

    if not payload.get("sub"):
        raise JWTError("Token has no subject")

    return payload


def user_from_token(token: str) -> AuthenticatedUser:
    """Verify ``token`` and build the :class:`AuthenticatedUser` it names.

    Raises:
        JWTError: When the token does not verify.
    """
    payload = verify_token(token)
    email = payload.get("email")
    return AuthenticatedUser(
        id=str(payload["sub"]),
        email=str(email).strip().lower() if email else None,
    )
