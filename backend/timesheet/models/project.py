"""Project ORM model."""

from datetime import datetime

from sqlalchemy import BigInteger, Boolean, String, TIMESTAMP, func
from sqlalchemy.orm import Mapped, mapped_column

from timesheet.database import Base


class Project(Base):
    """Known project label offered to users and to the AI prompt."""

    __tablename__ = "projects"

    id: Mapped[int] = mapped_column(
        BigInteger,
        primary_key=True,
        autoincrement=True,
    )
    name: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        server_default="true",
    )
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    def __repr__(self) -> str:
        return f"<Project(id={self.id}, name={self.name!r})>"
