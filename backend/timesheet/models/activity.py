"""Activity ORM model."""

from datetime import date, datetime

from sqlalchemy import (
    BigInteger,
    Date,
    ForeignKey,
    CheckConstraint,
    Index,
    Numeric,
    String,
    TIMESTAMP,
    Text,
    func,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from timesheet.database import Base


class Activity(Base):
    """One reported unit of work for a user on a calendar day.

    The sum of ``hours`` per ``(user_id, day)`` is kept under the daily
    ceiling by the write path, not by the database.
    """

    __tablename__ = "activities"
    __table_args__ = (
        Index("ix_activities_user_day", "user_id", "day"),
        CheckConstraint("hours >= 0 AND hours <= 24", name="ck_activities_hours_range"),
    )

    id: Mapped[int] = mapped_column(
        BigInteger,
        primary_key=True,
        autoincrement=True,
    )
    user_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
    )
    day: Mapped[date] = mapped_column(
        Date,
        nullable=False,
    )
    ticket_id: Mapped[str | None] = mapped_column(
        String(64),
        nullable=True,
    )
    subject: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        server_default="",
    )
    project: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        server_default="",
    )
    hours: Mapped[float] = mapped_column(
        Numeric(5, 2, asdecimal=False),
        nullable=False,
        server_default="0",
    )
    type: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        server_default="Other",
    )
    billing_code: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        server_default="",
    )
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    # --- Relationships ---
    profile: Mapped["Profile"] = relationship(  # noqa: F821
        back_populates="activities",
    )

    def __repr__(self) -> str:
        return (
            f"<Activity(id={self.id}, user_id={self.user_id!r}, "
            f"day={self.day}, hours={self.hours})>"
        )
