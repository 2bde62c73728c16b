"""Database keepalive.

The hosted database pauses idle projects; a tiny periodic query keeps it
awake. Also backs the ``/keepalive`` endpoint.
"""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from timesheet.database import async_session_factory
from timesheet.models import Profile

logger = logging.getLogger(__name__)


async def ping_database(session: AsyncSession) -> None:
    """Run the smallest query that touches a real table."""
    await session.execute(select(Profile.id).limit(1))


async def keepalive_job() -> None:
    """Scheduled entry point. Failures are logged, the next run retries."""
    try:
        async with async_session_factory() as session:
            await ping_database(session)
    except Exception:
        logger.exception("Database keepalive failed")
        return
    logger.debug("Database keepalive ok")
