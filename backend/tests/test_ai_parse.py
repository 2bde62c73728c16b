"""Tests for the AI parse pipeline and ``POST /api/v1/ai/parse``."""

from __future__ import annotations

from datetime import date
from typing import Callable
from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import AsyncClient

from timesheet.api.deps import get_gemini_client
from timesheet.core.enums import ActivityType
from timesheet.core.exceptions import AIServiceNotConfiguredError
from timesheet.external.gemini_client import DayParseResult
from timesheet.main import app
from timesheet.services.ai_parse_service import parse_day_text, prepare_row

DAY = date(2024, 3, 4)


def _fake_client(rows: list[dict]) -> MagicMock:
    client = MagicMock()
    client.parse_day = AsyncMock(return_value=DayParseResult(rows=rows))
    return client


class TestPrepareRow:

    def test_french_keys_accepted(self) -> None:
        row = prepare_row(
            {
                "sujet": " Daily ",
                "projet": "Apollo",
                "temps_passe_h": "0,5",
                "type": "réunion",
                "impute": "B1",
                "ticket": "",
            },
            ActivityType.OTHER,
        )
        assert row == {
            "ticket_id": None,
            "subject": "Daily",
            "project": "Apollo",
            "hours": 0.5,
            "type": ActivityType.MEETING,
            "billing_code": "B1",
        }

    def test_unknown_type_uses_fallback(self) -> None:
        row = prepare_row({"type": "nap"}, ActivityType.UNDEFINED)
        assert row["type"] is ActivityType.UNDEFINED
        assert row["hours"] == 0.0


class TestParseDayText:

    @pytest.mark.asyncio
    async def test_rows_capped_and_forced_to_day(self) -> None:
        client = _fake_client(
            [
                {"day": "1999-01-01", "subject": "A", "hours": 5, "type": "Work"},
                {"subject": "B", "hours": 5, "type": "ano"},
                {"subject": "C", "hours": 4, "type": "meeting"},
            ],
        )
        rows = await parse_day_text(client, "busy day", DAY, ["Apollo"])

        assert [r.hours for r in rows] == [2.5, 2.5, 2.0]
        assert all(r.day == DAY for r in rows)
        assert [r.type for r in rows] == [
            ActivityType.WORK,
            ActivityType.ANOMALY,
            ActivityType.MEETING,
        ]
        kwargs = client.parse_day.call_args.kwargs
        assert kwargs["known_projects"] == ["Apollo"]
        assert kwargs["ceiling"] == 7.0

    @pytest.mark.asyncio
    async def test_no_rows(self) -> None:
        assert await parse_day_text(_fake_client([]), "nothing", DAY, []) == []


class TestParseEndpoint:

    @pytest.mark.asyncio
    async def test_parse_success(
        self,
        async_client: AsyncClient,
        auth_headers: dict[str, str],
    ) -> None:
        client = _fake_client([{"subject": "Fix", "hours": 9, "type": "Anomalie"}])
        app.dependency_overrides[get_gemini_client] = lambda: client

        resp = await async_client.post(
            "/api/v1/ai/parse",
            json={"text": "fixed ABC-1 all day", "day": "2024-03-04", "known_projects": []},
            headers=auth_headers,
        )

        assert resp.status_code == 200
        rows = resp.json()["rows"]
        assert rows == [
            {
                "ticket_id": None,
                "subject": "Fix",
                "project": "",
                "hours": 7.0,
                "type": "Anomaly",
                "billing_code": "",
                "day": "2024-03-04",
            },
        ]

    @pytest.mark.asyncio
    async def test_known_projects_default_to_active_projects(
        self,
        async_client: AsyncClient,
        auth_headers: dict[str, str],
        mock_session: AsyncMock,
        make_result: Callable[..., MagicMock],
    ) -> None:
        mock_session.execute.return_value = make_result(scalars=["Apollo", "Zeus"])
        client = _fake_client([])
        app.dependency_overrides[get_gemini_client] = lambda: client

        resp = await async_client.post(
            "/api/v1/ai/parse",
            json={"text": "x", "day": "2024-03-04"},
            headers=auth_headers,
        )

        assert resp.status_code == 200
        assert client.parse_day.call_args.kwargs["known_projects"] == ["Apollo", "Zeus"]

    @pytest.mark.asyncio
    async def test_not_configured_returns_503(
        self,
        async_client: AsyncClient,
        auth_headers: dict[str, str],
    ) -> None:
        def _missing() -> None:
            raise AIServiceNotConfiguredError()

        app.dependency_overrides[get_gemini_client] = _missing

        resp = await async_client.post(
            "/api/v1/ai/parse",
            json={"text": "x", "day": "2024-03-04", "known_projects": []},
            headers=auth_headers,
        )

        assert resp.status_code == 503
        assert resp.json() == {
            "detail": "GEMINI_API_KEY is missing on the backend.",
            "code": "AI_NOT_CONFIGURED",
        }

    @pytest.mark.asyncio
    async def test_empty_text_rejected(
        self,
        async_client: AsyncClient,
        auth_headers: dict[str, str],
    ) -> None:
        client = _fake_client([])
        app.dependency_overrides[get_gemini_client] = lambda: client

        resp = await async_client.post(
            "/api/v1/ai/parse",
            json={"text": "", "day": "2024-03-04"},
            headers=auth_headers,
        )
        assert resp.status_code == 400
        assert resp.json()["detail"].startswith("text:")
        client.parse_day.assert_not_called()
