"""Team completion and monthly summary calculations.

Pure functions over in-memory profiles and entries; the manager service
loads the data and hands it over.
"""

from __future__ import annotations

import math
from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date
from typing import Any

from timesheet.core.enums import ActivityType
from timesheet.schemas.pm import (
    BreakdownItem,
    MonthlySummaryStats,
    UserCompletion,
    UserMonthlyStats,
)
from timesheet.services.aggregation import as_date, entry_field
from timesheet.services.normalizer import normalize_type

NO_PROJECT_LABEL = "(none)"


@dataclass
class _Accumulator:
    name: str
    role: str | None
    hours: float = 0.0
    days: set[date] = field(default_factory=set)


def percentage(part: float, total: float) -> int:
    """Integer percent of ``part`` in ``total``, half rounded up, 0 if empty."""
    if total <= 0:
        return 0
    return int(math.floor(part / total * 100 + 0.5))


def _seed(profiles: Iterable[Any]) -> dict[str, _Accumulator]:
    accumulators: dict[str, _Accumulator] = {}
    for profile in profiles:
        user_id = str(entry_field(profile, "id"))
        name = (entry_field(profile, "full_name") or "").strip() or user_id
        role = entry_field(profile, "role")
        accumulators[user_id] = _Accumulator(
            name=name,
            role=getattr(role, "value", role),
        )
    return accumulators


def _in_range(entries: Iterable[Any], date_from: date, date_to: date):
    for entry in entries:
        day = as_date(entry_field(entry, "day"))
        if date_from <= day <= date_to:
            yield entry, day


def compute_completion(
    profiles: Iterable[Any],
    entries: Iterable[Any],
    date_from: date,
    date_to: date,
) -> list[UserCompletion]:
    """Compute filled days and total hours per profile.

    Every profile appears in the result, with zeros when it has no entry.
    Several entries on the same day count as one filled day. Entries owned
    by unknown users are ignored.

    Args:
        profiles: Objects or mappings with ``id``, ``full_name``, ``role``.
        entries: Objects or mappings with ``user_id``, ``day``, ``hours``.
        date_from: First day of the range, inclusive.
        date_to: Last day of the range, inclusive.

    Returns:
        One :class:`UserCompletion` per profile, in profile order.
    """
    accumulators = _seed(profiles)

    for entry, day in _in_range(entries, date_from, date_to):
        acc = accumulators.get(str(entry_field(entry, "user_id")))
        if acc is None:
            continue
        acc.days.add(day)
        acc.hours += float(entry_field(entry, "hours") or 0)

    return [
        UserCompletion(
            user_id=user_id,
            name=acc.name,
            role=acc.role,
            filled_days=len(acc.days),
            total_hours=round(acc.hours, 1),
        )
        for user_id, acc in accumulators.items()
    ]


def _breakdown(hours_by_label: dict[str, float], total: float) -> list[BreakdownItem]:
    items = [
        BreakdownItem(
            label=label,
            hours=round(hours, 1),
            percentage=percentage(hours, total),
        )
        for label, hours in hours_by_label.items()
    ]
    items.sort(key=lambda item: (-item.hours, item.label))
    return items


def compute_monthly_summary_stats(
    profiles: Iterable[Any],
    entries: Iterable[Any],
    date_from: date,
    date_to: date,
    expected_working_days: int,
    hours_per_day: float = 7.0,
    fallback_type: ActivityType = ActivityType.OTHER,
) -> MonthlySummaryStats:
    """Compute the manager's summary of a period.

    On top of :func:`compute_completion`, hours are bucketed by activity
    type and by project label, and users with fewer distinct filled days
    than ``expected_working_days`` are flagged.

    Args:
        profiles: Team profiles.
        entries: Entries with ``user_id``, ``day``, ``hours``, ``type``,
            ``project``.
        date_from: First day, inclusive.
        date_to: Last day, inclusive.
        expected_working_days: Threshold under which a user is flagged.
        hours_per_day: Hours making one day-equivalent.
        fallback_type: Bucket for stored types that match no canonical value.

    Returns:
        The filled :class:`MonthlySummaryStats`.
    """
    profiles = list(profiles)
    entries = list(entries)
    known = {str(entry_field(p, "id")) for p in profiles}

    completion = compute_completion(profiles, entries, date_from, date_to)

    by_type: dict[str, float] = defaultdict(float)
    by_project: dict[str, float] = defaultdict(float)
    total = 0.0
    for entry, _day in _in_range(entries, date_from, date_to):
        if str(entry_field(entry, "user_id")) not in known:
            continue
        hours = float(entry_field(entry, "hours") or 0)
        type_label = normalize_type(
            entry_field(entry, "type"),
            fallback=fallback_type,
        ).value
        project_label = (entry_field(entry, "project") or "").strip() or NO_PROJECT_LABEL
        by_type[type_label] += hours
        by_project[project_label] += hours
        total += hours

    users = [
        UserMonthlyStats(
            **line.model_dump(),
            day_equivalents=round(line.total_hours / hours_per_day, 2),
            below_expected=line.filled_days < expected_working_days,
        )
        for line in completion
    ]

    return MonthlySummaryStats(
        from_date=date_from,
        to_date=date_to,
        expected_working_days=expected_working_days,
        total_hours=round(total, 1),
        total_day_equivalents=round(total / hours_per_day, 2),
        users=users,
        by_type=_breakdown(by_type, total),
        by_project=_breakdown(by_project, total),
    )
