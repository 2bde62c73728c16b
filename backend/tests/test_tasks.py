"""Tests for the scheduler wiring, the keepalive job and the rate limiter."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from timesheet.core.rate_limiter import TokenBucket
from timesheet.tasks import keepalive, scheduler


class TestSetupJobs:

    def test_disabled_when_interval_is_zero(self) -> None:
        with patch.object(scheduler, "settings") as fake_settings, patch.object(
            scheduler.scheduler, "add_job",
        ) as add_job:
            fake_settings.KEEPALIVE_INTERVAL_MINUTES = 0
            assert scheduler.setup_jobs() is False
        add_job.assert_not_called()

    def test_registers_keepalive(self) -> None:
        with patch.object(scheduler, "settings") as fake_settings, patch.object(
            scheduler.scheduler, "add_job",
        ) as add_job:
            fake_settings.KEEPALIVE_INTERVAL_MINUTES = 10
            assert scheduler.setup_jobs() is True
        assert add_job.call_args.kwargs["id"] == "keepalive_job"
        assert add_job.call_args.args[0] is keepalive.keepalive_job


class TestKeepaliveJob:

    @pytest.mark.asyncio
    async def test_pings_with_new_session(self) -> None:
        session = AsyncMock()
        factory = MagicMock()
        factory.return_value.__aenter__ = AsyncMock(return_value=session)
        factory.return_value.__aexit__ = AsyncMock(return_value=False)

        with patch.object(keepalive, "async_session_factory", factory):
            await keepalive.keepalive_job()

        session.execute.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_failure_is_logged_not_raised(self) -> None:
        factory = MagicMock()
        factory.return_value.__aenter__ = AsyncMock(side_effect=OSError("db down"))
        factory.return_value.__aexit__ = AsyncMock(return_value=False)

        with patch.object(keepalive, "async_session_factory", factory), patch.object(
            keepalive, "logger",
        ) as logger:
            await keepalive.keepalive_job()

        logger.exception.assert_called_once()


class TestTokenBucket:

    @pytest.mark.asyncio
    async def test_burst_is_available_immediately(self) -> None:
        bucket = TokenBucket(rate=0.001, burst=3)
        for _ in range(3):
            await bucket.acquire()
        assert bucket._tokens < 1.0

    @pytest.mark.asyncio
    async def test_waits_when_empty(self) -> None:
        bucket = TokenBucket(rate=0.001, burst=1)
        await bucket.acquire()
        with patch("timesheet.core.rate_limiter.asyncio.sleep", new_callable=AsyncMock) as sleep:
            sleep.side_effect = lambda _: bucket.__setattr__("_tokens", 1.0)
            await bucket.acquire()
        sleep.assert_awaited()
