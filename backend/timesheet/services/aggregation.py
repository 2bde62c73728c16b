"""Month View construction.

Folds a month of entries into one cell per calendar day, zero-filling the
days without data.
"""

from __future__ import annotations

import calendar
from collections import defaultdict
from collections.abc import Iterable
from datetime import date, timedelta
from typing import Any

from timesheet.schemas.activity import DayCell


def entry_field(entry: Any, name: str) -> Any:
    """Read ``name`` from an ORM object, a SQLAlchemy row or a mapping."""
    if isinstance(entry, dict):
        return entry.get(name)
    return getattr(entry, name, None)


def as_date(value: date | str) -> date:
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def month_bounds(year: int, month: int) -> tuple[date, date]:
    """Return the first and last calendar day of ``year``-``month``."""
    days_in_month = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, days_in_month)


def count_weekdays(start: date, end: date) -> int:
    """Number of Monday-Friday days in ``[start, end]``."""
    count = 0
    current = start
    while current <= end:
        if current.weekday() < 5:
            count += 1
        current += timedelta(days=1)
    return count


def build_month_view(
    year: int,
    month: int,
    entries: Iterable[Any],
) -> list[DayCell]:
    """Build the day-by-day projection of a month.

    Args:
        year: Calendar year.
        month: Month number, 1-12.
        entries: Objects or mappings exposing ``day`` and ``hours``.
            Entries outside the month are ignored.

    Returns:
        One :class:`DayCell` per day of the month, ascending. Weekend days
        are tagged ``weekend`` even when they carry entries.
    """
    first, last = month_bounds(year, month)

    hours_by_day: dict[date, float] = defaultdict(float)
    lines_by_day: dict[date, int] = defaultdict(int)
    for entry in entries:
        day = as_date(entry_field(entry, "day"))
        if not first <= day <= last:
            continue
        hours_by_day[day] += float(entry_field(entry, "hours") or 0)
        lines_by_day[day] += 1

    cells: list[DayCell] = []
    current = first
    while current <= last:
        lines = lines_by_day.get(current, 0)
        if current.weekday() >= 5:
            status = "weekend"
        elif lines > 0:
            status = "filled"
        else:
            status = "empty"
        cells.append(
            DayCell(
                day=current,
                total_hours=round(hours_by_day.get(current, 0.0), 1),
                lines_count=lines,
                status=status,
            ),
        )
        current += timedelta(days=1)

    return cells
