"""Activity-type normalization.

Maps free text (AI output, legacy stored values, user input) onto the
canonical :class:`ActivityType` enumeration. Total: every input maps to a
member, nothing raises.
"""

from __future__ import annotations

import re
import unicodedata
from typing import Any

from timesheet.core.enums import ActivityType

_ZERO_WIDTH = re.compile("[\u200b-\u200d\ufeff]")
_SEPARATORS = re.compile(r"[_/\-.,;:]+")
_WHITESPACE = re.compile(r"\s+")

_CANONICAL: dict[str, ActivityType] = {t.value: t for t in ActivityType}

# Keys are simplified: lowercase, no accents, separators collapsed to spaces.
SYNONYMS: dict[str, ActivityType] = {
    # Work
    "work": ActivityType.WORK,
    "travail": ActivityType.WORK,
    "dev": ActivityType.WORK,
    "development": ActivityType.WORK,
    "developpement": ActivityType.WORK,
    "developper": ActivityType.WORK,
    "dev sur": ActivityType.WORK,
    # Meeting
    "meeting": ActivityType.MEETING,
    "meetings": ActivityType.MEETING,
    "reunion": ActivityType.MEETING,
    "reunions": ActivityType.MEETING,
    "daily": ActivityType.MEETING,
    "standup": ActivityType.MEETING,
    "stand up": ActivityType.MEETING,
    "point": ActivityType.MEETING,
    "sync": ActivityType.MEETING,
    # Support (outside application incidents)
    "support": ActivityType.SUPPORT,
    "assistance": ActivityType.SUPPORT,
    "debug": ActivityType.SUPPORT,
    "bug": ActivityType.SUPPORT,
    "correction": ActivityType.SUPPORT,
    # Application incident
    "incident": ActivityType.APPLICATION_INCIDENT,
    "application incident": ActivityType.APPLICATION_INCIDENT,
    "incident applicatif": ActivityType.APPLICATION_INCIDENT,
    "incident appli": ActivityType.APPLICATION_INCIDENT,
    "incident application": ActivityType.APPLICATION_INCIDENT,
    # Project
    "project": ActivityType.PROJECT,
    "projet": ActivityType.PROJECT,
    # Evolution
    "evolution": ActivityType.EVOLUTION,
    "evol": ActivityType.EVOLUTION,
    "evolution technique": ActivityType.EVOLUTION,
    "feature": ActivityType.EVOLUTION,
    "enhancement": ActivityType.EVOLUTION,
    # Anomaly
    "anomaly": ActivityType.ANOMALY,
    "anomalies": ActivityType.ANOMALY,
    "ano": ActivityType.ANOMALY,
    "anomalie": ActivityType.ANOMALY,
    # Undefined
    "undefined": ActivityType.UNDEFINED,
    "non defini": ActivityType.UNDEFINED,
    "ticket non defini": ActivityType.UNDEFINED,
    "ticket": ActivityType.UNDEFINED,
    # Leave
    "leave": ActivityType.LEAVE,
    "holiday": ActivityType.LEAVE,
    "holidays": ActivityType.LEAVE,
    "vacation": ActivityType.LEAVE,
    "conge": ActivityType.LEAVE,
    "conges": ActivityType.LEAVE,
    "cp": ActivityType.LEAVE,
    "vacances": ActivityType.LEAVE,
    # Weekend
    "weekend": ActivityType.WEEKEND,
    "week end": ActivityType.WEEKEND,
    "we": ActivityType.WEEKEND,
    # Training
    "training": ActivityType.TRAINING,
    "internship": ActivityType.TRAINING,
    "formation": ActivityType.TRAINING,
    "stage": ActivityType.TRAINING,
    # Other
    "other": ActivityType.OTHER,
    "autre": ActivityType.OTHER,
    "divers": ActivityType.OTHER,
    "misc": ActivityType.OTHER,
}


def simplify(text: str) -> str:
    """Lowercase, strip diacritics and collapse separators/whitespace."""
    lowered = unicodedata.normalize("NFD", text.lower())
    no_marks = "".join(ch for ch in lowered if not unicodedata.combining(ch))
    spaced = _SEPARATORS.sub(" ", no_marks)
    return _WHITESPACE.sub(" ", spaced).strip()


def normalize_type(
    raw: Any,
    fallback: ActivityType = ActivityType.OTHER,
) -> ActivityType:
    """Map ``raw`` onto a canonical activity type.

    Args:
        raw: Any value; ``None`` and non-strings are stringified.
        fallback: Member returned when nothing matches.

    Returns:
        An :class:`ActivityType` member, never anything else.
    """
    if isinstance(raw, ActivityType):
        return raw

    cleaned = unicodedata.normalize(
        "NFC",
        _ZERO_WIDTH.sub("", "" if raw is None else str(raw)).strip(),
    )
    if not cleaned:
        return fallback

    exact = _CANONICAL.get(cleaned)
    if exact is not None:
        return exact

    return SYNONYMS.get(simplify(cleaned), fallback)
