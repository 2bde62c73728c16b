"""Manager dashboard service.

Loads the team's profiles and activities, then hands them to the pure
completion calculators.
"""

from __future__ import annotations

from datetime import date

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from timesheet.config import settings
from timesheet.core.enums import ActivityType
from timesheet.models import Activity
from timesheet.schemas.pm import CompletionResponse, MonthlySummaryStats
from timesheet.services.aggregation import count_weekdays, month_bounds
from timesheet.services.completion import (
    compute_completion,
    compute_monthly_summary_stats,
)
from timesheet.services.profile_service import list_profiles


class PmService:
    """Aggregations over the whole team."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def _entries(self, date_from: date, date_to: date):
        stmt = select(
            Activity.user_id,
            Activity.day,
            Activity.hours,
            Activity.type,
            Activity.project,
        ).where(
            Activity.day >= date_from,
            Activity.day <= date_to,
        )
        result = await self.session.execute(stmt)
        return result.all()

    async def get_completion(
        self,
        date_from: date,
        date_to: date,
    ) -> CompletionResponse:
        """Filled days and hours of every profile in ``[date_from, date_to]``."""
        profiles = await list_profiles(self.session)
        entries = await self._entries(date_from, date_to)
        return CompletionResponse(
            from_date=date_from,
            to_date=date_to,
            users=compute_completion(profiles, entries, date_from, date_to),
        )

    async def get_monthly_summary(
        self,
        year: int,
        month: int,
        expected_working_days: int | None = None,
    ) -> MonthlySummaryStats:
        """Team statistics for one month.

        ``expected_working_days`` defaults to ``EXPECTED_WORKING_DAYS``, then
        to the number of weekdays in the month.
        """
        start, end = month_bounds(year, month)
        if expected_working_days is None:
            expected_working_days = settings.EXPECTED_WORKING_DAYS
        if expected_working_days is None:
            expected_working_days = count_weekdays(start, end)

        profiles = await list_profiles(self.session)
        entries = await self._entries(start, end)
        return compute_monthly_summary_stats(
            profiles,
            entries,
            start,
            end,
            expected_working_days=expected_working_days,
            hours_per_day=settings.HOURS_PER_DAY,
            fallback_type=ActivityType(settings.ACTIVITY_TYPE_FALLBACK),
        )
