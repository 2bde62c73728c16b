"""Activity persistence and read-side views.

Day replacement, appends, the Month View, range listings used by the
manager pages and exports, and billing-code updates. SQLAlchemy 2.0 async
queries.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import date

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from timesheet.config import settings
from timesheet.core.exceptions import NotFoundError, ValidationError
from timesheet.models import Activity, Project
from timesheet.schemas.activity import (
    ActivityRecord,
    ActivityRow,
    ActivityRowInput,
    MonthViewResponse,
)
from timesheet.services.aggregation import build_month_view, month_bounds
from timesheet.services.capping import exceeds_ceiling, total_hours

logger = logging.getLogger(__name__)


class ActivityService:
    """Runs activity queries and writes for one request."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_day(self, user_id: str, day: date) -> list[ActivityRow]:
        """Rows of ``user_id`` on ``day`` in insertion order."""
        stmt = (
            select(Activity)
            .where(Activity.user_id == user_id, Activity.day == day)
            .order_by(Activity.id)
        )
        result = await self.session.execute(stmt)
        return [
            ActivityRow.model_validate(a, from_attributes=True)
            for a in result.scalars().all()
        ]

    async def get_month_view(
        self,
        user_id: str,
        year: int,
        month: int,
    ) -> MonthViewResponse:
        """Day-by-day totals of ``user_id`` for one month.

        Args:
            user_id: Owner of the entries.
            year: Calendar year.
            month: Month number, 1-12.

        Returns:
            Month View with one cell per calendar day.
        """
        start, end = month_bounds(year, month)
        stmt = select(Activity.day, Activity.hours).where(
            Activity.user_id == user_id,
            Activity.day >= start,
            Activity.day <= end,
        )
        result = await self.session.execute(stmt)
        return MonthViewResponse(
            year=year,
            month=month,
            days=build_month_view(year, month, result.all()),
        )

    async def list_activities(
        self,
        date_from: date,
        date_to: date,
        user_id: str | None = None,
    ) -> list[Activity]:
        """Activities in ``[date_from, date_to]``, optionally for one user.

        Ordered by user, day, then insertion order.
        """
        stmt = select(Activity).where(
            Activity.day >= date_from,
            Activity.day <= date_to,
        )
        if user_id is not None:
            stmt = stmt.where(Activity.user_id == user_id)
        stmt = stmt.order_by(Activity.user_id, Activity.day, Activity.id)

        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_records(
        self,
        user_id: str,
        date_from: date,
        date_to: date,
    ) -> list[ActivityRecord]:
        activities = await self.list_activities(date_from, date_to, user_id=user_id)
        return [
            ActivityRecord.model_validate(a, from_attributes=True)
            for a in activities
        ]

    async def list_project_names(self) -> list[str]:
        """Active project labels, alphabetical."""
        stmt = (
            select(Project.name)
            .where(Project.is_active.is_(True))
            .order_by(Project.name)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    @staticmethod
    def _check_ceiling(day: date, hours: float) -> None:
        ceiling = settings.DAILY_HOURS_CEILING
        if exceeds_ceiling(hours, ceiling):
            raise ValidationError(
                f"Total hours for {day.isoformat()} ({hours:g}h) exceed "
                f"the daily ceiling of {ceiling:g}h",
            )

    @staticmethod
    def _to_models(
        user_id: str,
        day: date,
        rows: Sequence[ActivityRowInput],
    ) -> list[Activity]:
        return [
            Activity(
                user_id=user_id,
                day=day,
                ticket_id=row.ticket_id,
                subject=row.subject,
                project=row.project,
                hours=row.hours,
                type=row.type.value,
                billing_code=row.billing_code,
            )
            for row in rows
        ]

    async def replace_day(
        self,
        user_id: str,
        day: date,
        rows: Sequence[ActivityRowInput],
        enforce_ceiling: bool = True,
    ) -> int:
        """Replace every row of ``user_id`` on ``day`` with ``rows``.

        The delete and the inserts run inside one SAVEPOINT of the request
        transaction; the request commits or rolls back both together.

        Args:
            user_id: Owner of the day.
            day: Day to replace.
            rows: New rows (may be empty, which clears the day).
            enforce_ceiling: Reject totals above the daily ceiling. Manager
                corrections pass False.

        Returns:
            Number of inserted rows.

        Raises:
            ValidationError: Total above the ceiling while enforced.
        """
        if enforce_ceiling:
            self._check_ceiling(day, total_hours(r.hours for r in rows))

        async with self.session.begin_nested():
            await self.session.execute(
                delete(Activity).where(
                    Activity.user_id == user_id,
                    Activity.day == day,
                ),
            )
            self.session.add_all(self._to_models(user_id, day, rows))
            await self.session.flush()

        logger.info(
            "Replaced day=%s for user=%s with %d rows",
            day,
            user_id,
            len(rows),
        )
        return len(rows)

    async def append_day(
        self,
        user_id: str,
        day: date,
        rows: Sequence[ActivityRowInput],
    ) -> int:
        """Add ``rows`` to ``day`` without touching the stored ones.

        Raises:
            ValidationError: Stored plus new hours exceed the ceiling.
        """
        stmt = select(func.coalesce(func.sum(Activity.hours), 0)).where(
            Activity.user_id == user_id,
            Activity.day == day,
        )
        result = await self.session.execute(stmt)
        existing = float(result.scalar_one() or 0)
        self._check_ceiling(day, existing + total_hours(r.hours for r in rows))

        self.session.add_all(self._to_models(user_id, day, rows))
        await self.session.flush()

        logger.info("Appended %d rows to day=%s for user=%s", len(rows), day, user_id)
        return len(rows)

    async def update_billing_code(
        self,
        activity_id: int,
        billing_code: str,
    ) -> ActivityRecord:
        """Set the billing code of one row, leaving every other field alone.

        Raises:
            NotFoundError: No row with ``activity_id``.
        """
        activity = await self.session.get(Activity, activity_id)
        if activity is None:
            raise NotFoundError(f"Activity {activity_id} not found")

        activity.billing_code = billing_code
        await self.session.flush()

        logger.info("Billing code of activity=%s set to %r", activity_id, billing_code)
        return ActivityRecord.model_validate(activity, from_attributes=True)
