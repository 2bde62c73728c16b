"""Tests for ``timesheet.core.security`` and the bearer dependency."""

from __future__ import annotations

from typing import Callable
from unittest.mock import AsyncMock

import pytest
from httpx import AsyncClient
from jose import JWTError

from timesheet.core.security import AuthenticatedUser, user_from_token, verify_token


# ---------------------------------------------------------------------------
# Token verification
# ---------------------------------------------------------------------------


class TestVerifyToken:
    """Signature, audience, expiry and subject checks."""

    def test_valid_token_returns_payload(self, issue_token: Callable[..., str]) -> None:
        token = issue_token("abc", email="a@example.com")
        payload = verify_token(token)
        assert payload["sub"] == "abc"
        assert payload["email"] == "a@example.com"

    def test_wrong_secret_rejected(self, issue_token: Callable[..., str]) -> None:
        token = issue_token("abc", secret="another-secret-entirely-0123456789")
        with pytest.raises(JWTError):
            verify_token(token)

    def test_wrong_audience_rejected(self, issue_token: Callable[..., str]) -> None:
        token = issue_token("abc", audience="anon")
        with pytest.raises(JWTError):
            verify_token(token)

    def test_expired_token_rejected(self, issue_token: Callable[..., str]) -> None:
        token = issue_token("abc", expires_in=-60)
        with pytest.raises(JWTError):
            verify_token(token)

    def test_missing_subject_rejected(self, issue_token: Callable[..., str]) -> None:
        token = issue_token(None, email="a@example.com")
        with pytest.raises(JWTError):
            verify_token(token)

    def test_garbage_rejected(self) -> None:
        with pytest.raises(JWTError):
            verify_token("not.a.jwt")


class TestUserFromToken:

    def test_email_is_lowercased(self, issue_token: Callable[..., str]) -> None:
        token = issue_token("abc", email="  Alice@Example.COM ")
        assert user_from_token(token) == AuthenticatedUser(id="abc", email="alice@example.com")

    def test_email_optional(self, issue_token: Callable[..., str]) -> None:
        assert user_from_token(issue_token("abc")).email is None


# ---------------------------------------------------------------------------
# Bearer dependency through the API
# ---------------------------------------------------------------------------


class TestBearerDependency:

    @pytest.mark.asyncio
    async def test_missing_header_returns_401(self, async_client: AsyncClient) -> None:
        resp = await async_client.get("/api/v1/me")
        assert resp.status_code == 401
        assert resp.json() == {"detail": "Unauthorized"}

    @pytest.mark.asyncio
    async def test_invalid_token_returns_401(self, async_client: AsyncClient) -> None:
        resp = await async_client.get(
            "/api/v1/me",
            headers={"Authorization": "Bearer invalid"},
        )
        assert resp.status_code == 401

    @pytest.mark.asyncio
    async def test_expired_token_returns_401(
        self,
        async_client: AsyncClient,
        mock_session: AsyncMock,
        issue_token: Callable[..., str],
    ) -> None:
        token = issue_token("abc", expires_in=-60)
        resp = await async_client.get(
            "/api/v1/activities/day",
            params={"day": "2024-03-04"},
            headers={"Authorization": f"Bearer {token}"},
        )
        assert resp.status_code == 401
        mock_session.execute.assert_not_called()
