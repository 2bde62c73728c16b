"""Tests for ``timesheet.services.aggregation`` (Month View)."""

from __future__ import annotations

from datetime import date
from types import SimpleNamespace

from timesheet.services.aggregation import build_month_view, count_weekdays, month_bounds


class TestBuildMonthView:

    def test_one_cell_per_day_leap_february(self) -> None:
        cells = build_month_view(2024, 2, [])
        assert len(cells) == 29
        assert cells[0].day == date(2024, 2, 1)
        assert cells[-1].day == date(2024, 2, 29)

    def test_filled_day(self) -> None:
        entries = [
            {"day": "2024-03-04", "hours": 3},
            {"day": "2024-03-04", "hours": 4},
        ]
        cells = {c.day: c for c in build_month_view(2024, 3, entries)}
        monday = cells[date(2024, 3, 4)]
        assert monday.total_hours == 7.0
        assert monday.lines_count == 2
        assert monday.status == "filled"

    def test_empty_weekday_and_weekend(self) -> None:
        cells = {c.day: c for c in build_month_view(2024, 3, [])}
        assert cells[date(2024, 3, 5)].status == "empty"
        assert cells[date(2024, 3, 2)].status == "weekend"
        assert cells[date(2024, 3, 3)].status == "weekend"

    def test_weekend_status_wins_over_entries(self) -> None:
        cells = {c.day: c for c in build_month_view(2024, 3, [{"day": date(2024, 3, 9), "hours": 2}])}
        saturday = cells[date(2024, 3, 9)]
        assert saturday.status == "weekend"
        assert saturday.total_hours == 2.0
        assert saturday.lines_count == 1

    def test_entries_outside_month_ignored(self) -> None:
        entries = [
            {"day": "2024-02-29", "hours": 7},
            {"day": "2024-04-01", "hours": 7},
        ]
        cells = build_month_view(2024, 3, entries)
        assert sum(c.lines_count for c in cells) == 0

    def test_totals_rounded_to_one_decimal(self) -> None:
        entries = [
            SimpleNamespace(day=date(2024, 3, 5), hours=1.33),
            SimpleNamespace(day=date(2024, 3, 5), hours=1.33),
        ]
        cells = {c.day: c for c in build_month_view(2024, 3, entries)}
        assert cells[date(2024, 3, 5)].total_hours == 2.7

    def test_days_ascending(self) -> None:
        days = [c.day for c in build_month_view(2024, 12, [])]
        assert days == sorted(days)
        assert len(days) == 31


class TestCalendarHelpers:

    def test_month_bounds(self) -> None:
        assert month_bounds(2023, 2) == (date(2023, 2, 1), date(2023, 2, 28))
        assert month_bounds(2024, 12) == (date(2024, 12, 1), date(2024, 12, 31))

    def test_count_weekdays(self) -> None:
        assert count_weekdays(date(2024, 3, 1), date(2024, 3, 31)) == 21
        assert count_weekdays(date(2024, 3, 2), date(2024, 3, 3)) == 0
