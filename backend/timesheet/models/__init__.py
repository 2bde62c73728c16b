"""ORM models package.

Importing this module ensures every model is registered with the
SQLAlchemy ``Base.metadata`` so that Alembic autogenerate can detect
all tables.
"""

from timesheet.models.activity import Activity
from timesheet.models.profile import Profile
from timesheet.models.project import Project

__all__ = [
    "Activity",
    "Profile",
    "Project",
]
