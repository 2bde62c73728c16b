"""Fixed enumerations shared by models, schemas and services."""

from __future__ import annotations

from enum import Enum


class ActivityType(str, Enum):
    """Canonical activity types an entry can carry."""

    WORK = "Work"
    MEETING = "Meeting"
    SUPPORT = "Support"
    PROJECT = "Project"
    EVOLUTION = "Evolution"
    ANOMALY = "Anomaly"
    APPLICATION_INCIDENT = "Application Incident"
    UNDEFINED = "Undefined"
    OTHER = "Other"
    LEAVE = "Leave"
    WEEKEND = "Weekend"
    TRAINING = "Training"

    @classmethod
    def values(cls) -> list[str]:
        return [member.value for member in cls]


class Role(str, Enum):
    """Profile role. Exactly two variants."""

    MEMBER = "member"
    MANAGER = "manager"
