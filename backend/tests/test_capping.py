"""Tests for ``timesheet.services.capping``."""

from __future__ import annotations

import math

import pytest

from timesheet.services.capping import (
    cap_rows_to_daily_ceiling,
    coerce_hours,
    exceeds_ceiling,
)


def _hours(rows: list[dict]) -> list[float]:
    return [r["hours"] for r in rows]


class TestCapRowsToDailyCeiling:

    def test_scales_down_to_ceiling(self) -> None:
        rows = [{"hours": 5}, {"hours": 5}, {"hours": 4}]
        capped = cap_rows_to_daily_ceiling(rows, 7)
        assert _hours(capped) == [2.5, 2.5, 2.0]
        assert math.isclose(sum(_hours(capped)), 7.0)

    def test_within_ceiling_is_unchanged(self) -> None:
        rows = [{"hours": 3, "subject": "a"}, {"hours": 4, "subject": "b"}]
        assert cap_rows_to_daily_ceiling(rows, 7) == [
            {"hours": 3.0, "subject": "a"},
            {"hours": 4.0, "subject": "b"},
        ]

    def test_negative_hours_clamped_to_zero(self) -> None:
        capped = cap_rows_to_daily_ceiling([{"hours": -2}, {"hours": 3}], 7)
        assert _hours(capped) == [0.0, 3.0]

    def test_all_zero_unchanged(self) -> None:
        assert _hours(cap_rows_to_daily_ceiling([{"hours": 0}, {"hours": 0}], 7)) == [0.0, 0.0]

    def test_empty_list(self) -> None:
        assert cap_rows_to_daily_ceiling([], 7) == []

    def test_rounding_residual_goes_to_largest_row(self) -> None:
        rows = [{"hours": 3}, {"hours": 3}, {"hours": 3}]
        capped = cap_rows_to_daily_ceiling(rows, 7)
        # 7/3 = 2.33 each, residual 0.01 on the first of the equal rows
        assert _hours(capped) == [2.34, 2.33, 2.33]
        assert not exceeds_ceiling(sum(_hours(capped)), 7)

    @pytest.mark.parametrize(
        "hours",
        [
            [10],
            [1.11, 2.22, 3.33, 4.44],
            [0.01, 0.01, 23.99],
            [6.99, 6.99, 6.99, 6.99],
            [24, 24, 24, 24, 24, 24, 24],
        ],
    )
    def test_sum_never_above_ceiling(self, hours: list[float]) -> None:
        capped = cap_rows_to_daily_ceiling([{"hours": h} for h in hours], 7)
        values = _hours(capped)
        assert sum(values) <= 7 + 1e-9
        assert all(v >= 0 for v in values)
        assert all(round(v, 2) == v for v in values)

    def test_idempotent(self) -> None:
        once = cap_rows_to_daily_ceiling([{"hours": 5}, {"hours": 5}, {"hours": 4}], 7)
        assert cap_rows_to_daily_ceiling(once, 7) == once

    def test_input_not_mutated(self) -> None:
        rows = [{"hours": 8, "subject": "x"}]
        cap_rows_to_daily_ceiling(rows, 7)
        assert rows == [{"hours": 8, "subject": "x"}]

    def test_other_fields_preserved(self) -> None:
        capped = cap_rows_to_daily_ceiling(
            [{"hours": 8, "subject": "x", "type": "Work"}],
            7,
        )
        assert capped == [{"hours": 7.0, "subject": "x", "type": "Work"}]

    def test_custom_key(self) -> None:
        capped = cap_rows_to_daily_ceiling([{"h": 10}], 7, key="h")
        assert capped == [{"h": 7.0}]

    @pytest.mark.parametrize("ceiling", [0, -1])
    def test_non_positive_ceiling_rejected(self, ceiling: float) -> None:
        with pytest.raises(ValueError):
            cap_rows_to_daily_ceiling([{"hours": 1}], ceiling)


class TestCoerceHours:

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            (3, 3.0),
            (2.5, 2.5),
            ("3.5", 3.5),
            ("3,5", 3.5),
            ("2h", 2.0),
            (-1, 0.0),
            ("abc", 0.0),
            (None, 0.0),
            (True, 0.0),
            (float("nan"), 0.0),
            (float("inf"), 0.0),
        ],
    )
    def test_values(self, raw: object, expected: float) -> None:
        assert coerce_hours(raw) == expected


class TestExceedsCeiling:

    def test_tolerance(self) -> None:
        assert not exceeds_ceiling(7.0 + 1e-12, 7)
        assert exceeds_ceiling(7.01, 7)
