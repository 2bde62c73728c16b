"""Free-text to rows pipeline.

Calls the completion service, then pushes every proposed row through the
same normalization as user input and caps the day to the ceiling.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any

from timesheet.config import settings
from timesheet.core.enums import ActivityType
from timesheet.external.gemini_client import GeminiClient
from timesheet.schemas.activity import ActivityRow
from timesheet.services.capping import cap_rows_to_daily_ceiling, coerce_hours
from timesheet.services.normalizer import normalize_type

logger = logging.getLogger(__name__)

# Canonical key -> accepted keys, first match wins. The French keys are the
# ones older prompts produced.
_FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "ticket_id": ("ticket_id", "ticket", "ticketId"),
    "subject": ("subject", "sujet"),
    "project": ("project", "projet"),
    "hours": ("hours", "temps_passe_h", "time_spent_h"),
    "type": ("type",),
    "billing_code": ("billing_code", "impute"),
}


def _pick(raw: dict[str, Any], keys: tuple[str, ...]) -> Any:
    for key in keys:
        if key in raw and raw[key] is not None:
            return raw[key]
    return None


def prepare_row(raw: dict[str, Any], fallback: ActivityType) -> dict[str, Any]:
    """Map one raw model row onto clean row fields."""
    values = {name: _pick(raw, keys) for name, keys in _FIELD_ALIASES.items()}
    ticket = str(values["ticket_id"] or "").strip()[:64]
    return {
        "ticket_id": ticket or None,
        "subject": str(values["subject"] or "").strip(),
        "project": str(values["project"] or "").strip()[:255],
        "hours": coerce_hours(values["hours"]),
        "type": normalize_type(values["type"], fallback=fallback),
        "billing_code": str(values["billing_code"] or "").strip()[:64],
    }


async def parse_day_text(
    client: GeminiClient,
    text: str,
    day: date,
    known_projects: list[str],
) -> list[ActivityRow]:
    """Turn a free-text description of ``day`` into capped rows.

    Args:
        client: Configured Gemini client.
        text: The contributor's description.
        day: Day every row is forced onto.
        known_projects: Project labels offered to the model.

    Returns:
        Validated rows whose hours sum to at most the daily ceiling.
    """
    fallback = ActivityType(settings.ACTIVITY_TYPE_FALLBACK)
    ceiling = settings.DAILY_HOURS_CEILING

    result = await client.parse_day(
        text=text,
        day=day,
        known_projects=known_projects,
        ceiling=ceiling,
        fallback_type=fallback,
    )

    prepared = [prepare_row(raw, fallback) for raw in result.rows]
    capped = cap_rows_to_daily_ceiling(prepared, ceiling)

    logger.info(
        "AI parse for day=%s produced %d rows (%.2fh)",
        day,
        len(capped),
        sum(r["hours"] for r in capped),
    )
    return [ActivityRow(day=day, **row) for row in capped]
