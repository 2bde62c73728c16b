"""Daily-ceiling enforcement for a day's rows.

The capper proportionally rescales hours so the day never sums above the
ceiling, then corrects the 2-decimal rounding drift on the largest row.
Pure and deterministic; input rows are never mutated.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

EPSILON = 1e-9


def coerce_hours(value: Any) -> float:
    """Turn an hours value from untrusted input into a non-negative float.

    Accepts numbers and numeric strings (``"3.5"``, ``"3,5"``, ``"2h"``).
    Anything unreadable becomes ``0.0``.
    """
    if isinstance(value, bool) or value is None:
        return 0.0
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).strip().lower().replace(",", ".").rstrip("h").strip()
        try:
            number = float(text)
        except ValueError:
            return 0.0
    if math.isnan(number) or math.isinf(number):
        return 0.0
    return max(0.0, number)


def total_hours(values: Iterable[float]) -> float:
    return sum(float(v) for v in values)


def exceeds_ceiling(total: float, ceiling: float) -> bool:
    return total > ceiling + EPSILON


def _index_of_largest(rows: Sequence[Mapping[str, Any]], key: str) -> int:
    # max() keeps the first of equal values
    return max(range(len(rows)), key=lambda i: rows[i][key])


def cap_rows_to_daily_ceiling(
    rows: Sequence[Mapping[str, Any]],
    ceiling: float,
    key: str = "hours",
) -> list[dict[str, Any]]:
    """Rescale the rows of one day so their hours never exceed ``ceiling``.

    1. Clamp every row's hours to ``>= 0``.
    2. If the total is within the ceiling (or zero) return the clamped rows.
    3. Otherwise multiply each row by ``ceiling / total``, rounding to
       2 decimals.
    4. Add the rounded residual ``ceiling - sum`` to the largest row
       (first one on ties).
    5. If the sum is still above the ceiling, take the excess off the
       largest row, never below 0.

    Args:
        rows: Mappings carrying an hours value under ``key``.
        ceiling: Maximum total hours for the day, strictly positive.
        key: Name of the hours field.

    Returns:
        New row dicts; every other field is copied unchanged.

    Raises:
        ValueError: If ``ceiling`` is not strictly positive.
    """
    if not ceiling > 0:
        raise ValueError(f"ceiling must be > 0, got {ceiling!r}")

    capped = [{**row, key: coerce_hours(row.get(key))} for row in rows]
    total = total_hours(r[key] for r in capped)
    if total == 0 or not exceeds_ceiling(total, ceiling):
        return capped

    factor = ceiling / total
    for row in capped:
        row[key] = round(row[key] * factor, 2)

    delta = round(ceiling - total_hours(r[key] for r in capped), 2)
    if delta != 0:
        i = _index_of_largest(capped, key)
        capped[i][key] = max(0.0, round(capped[i][key] + delta, 2))

    excess = total_hours(r[key] for r in capped) - ceiling
    if excess > EPSILON:
        i = _index_of_largest(capped, key)
        # floor to the cent so the subtraction never rounds back up
        reduced = math.floor((capped[i][key] - excess) * 100 + EPSILON) / 100
        capped[i][key] = max(0.0, reduced)

    return capped
