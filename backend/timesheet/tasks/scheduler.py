"""APScheduler setup.

Registers the periodic jobs.
"""

from __future__ import annotations

import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from timesheet.config import settings

logger = logging.getLogger(__name__)

scheduler = AsyncIOScheduler(timezone=settings.DEFAULT_TIMEZONE)


def setup_jobs() -> bool:
    """Register the scheduled jobs.

    - keepalive_job: every KEEPALIVE_INTERVAL_MINUTES (0 disables it)

    Returns:
        True when at least one job was registered.
    """
    interval = settings.KEEPALIVE_INTERVAL_MINUTES
    if interval <= 0:
        logger.info("Keepalive job disabled")
        return False

    from timesheet.tasks.keepalive import keepalive_job

    scheduler.add_job(
        keepalive_job,
        trigger=IntervalTrigger(minutes=interval),
        id="keepalive_job",
        name="Database Keepalive",
        replace_existing=True,
        max_instances=1,
    )
    logger.info("Registered keepalive_job: every %d minutes", interval)
    return True
