"""Spreadsheet export of activity rows.

CSV is semicolon-delimited UTF-8 with a byte-order mark so that
spreadsheet software opens accents correctly; XLSX is written with
openpyxl. Text cells are sanitized against formula injection in both.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from io import BytesIO
from typing import Any, Literal

from openpyxl import Workbook
from openpyxl.utils import get_column_letter

from timesheet.services.aggregation import entry_field

ChargeUnit = Literal["hours", "days"]
ExportFormat = Literal["csv", "xlsx"]

MEMBER_HEADER: list[str] = [
    "date",
    "ticket_id",
    "subject",
    "project",
    "charge",
    "type",
    "billing_code",
]
TEAM_HEADER: list[str] = ["full_name", "user_id", *MEMBER_HEADER]

_FORMULA_PREFIXES = ("=", "+", "-", "@")

MEDIA_TYPES: dict[str, str] = {
    "csv": "text/csv; charset=utf-8",
    "xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
}


def sanitize_cell(value: Any) -> str:
    """Render ``value`` as a single-line, formula-safe text cell."""
    text = (
        ("" if value is None else str(value))
        .replace(";", ",")
        .replace("\r", " ")
        .replace("\n", " ")
    )
    if text.startswith(_FORMULA_PREFIXES):
        text = "'" + text
    return text


def charge_value(hours: float, unit: ChargeUnit, hours_per_day: float) -> float:
    """Express ``hours`` in the deployment's charge unit."""
    if unit == "days":
        return round(hours / hours_per_day, 2)
    return round(hours, 2)


def _type_label(entry: Any) -> str:
    raw = entry_field(entry, "type")
    return str(getattr(raw, "value", raw) or "")


def _member_columns(entry: Any, unit: ChargeUnit, hours_per_day: float) -> list[Any]:
    day = entry_field(entry, "day")
    return [
        day.isoformat() if hasattr(day, "isoformat") else str(day),
        entry_field(entry, "ticket_id") or "",
        entry_field(entry, "subject") or "",
        entry_field(entry, "project") or "",
        charge_value(float(entry_field(entry, "hours") or 0), unit, hours_per_day),
        _type_label(entry),
        entry_field(entry, "billing_code") or "",
    ]


def member_export_rows(
    activities: Iterable[Any],
    charge_unit: ChargeUnit = "hours",
    hours_per_day: float = 7.0,
) -> list[list[Any]]:
    """One export line per activity, in :data:`MEMBER_HEADER` order."""
    return [_member_columns(a, charge_unit, hours_per_day) for a in activities]


def team_export_rows(
    activities: Iterable[Any],
    names_by_id: Mapping[str, str],
    charge_unit: ChargeUnit = "hours",
    hours_per_day: float = 7.0,
) -> list[list[Any]]:
    """Like :func:`member_export_rows`, prefixed with full name and user id."""
    lines: list[list[Any]] = []
    for activity in activities:
        user_id = str(entry_field(activity, "user_id"))
        lines.append(
            [
                names_by_id.get(user_id, user_id),
                user_id,
                *_member_columns(activity, charge_unit, hours_per_day),
            ],
        )
    return lines


def render_csv(header: Sequence[str], rows: Iterable[Sequence[Any]]) -> bytes:
    """Render a semicolon-delimited CSV document, UTF-8 with BOM."""
    lines = [";".join(sanitize_cell(h) for h in header)]
    lines.extend(";".join(sanitize_cell(v) for v in row) for row in rows)
    return "\n".join(lines).encode("utf-8-sig")


def render_xlsx(
    header: Sequence[str],
    rows: Iterable[Sequence[Any]],
    title: str = "Activities",
) -> bytes:
    """Render a one-sheet XLSX workbook.

    Numbers are written as numbers; everything else goes through
    :func:`sanitize_cell`.
    """
    wb = Workbook()
    ws = wb.active
    # sheet titles are limited to 31 characters
    ws.title = title[:31]
    ws.append(list(header))
    for row in rows:
        ws.append(
            [
                v if isinstance(v, (int, float)) and not isinstance(v, bool)
                else sanitize_cell(v)
                for v in row
            ],
        )
    ws.freeze_panes = "A2"
    for index, name in enumerate(header, start=1):
        ws.column_dimensions[get_column_letter(index)].width = max(12, len(name) + 2)

    bio = BytesIO()
    wb.save(bio)
    return bio.getvalue()


def render(
    export_format: ExportFormat,
    header: Sequence[str],
    rows: Iterable[Sequence[Any]],
    title: str = "Activities",
) -> bytes:
    if export_format == "xlsx":
        return render_xlsx(header, rows, title=title)
    return render_csv(header, rows)
