"""Profile ORM model."""

from datetime import datetime

from sqlalchemy import String, TIMESTAMP, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from timesheet.database import Base


class Profile(Base):
    """One profile per identity-provider account.

    ``id`` is the account id issued by the identity provider.
    """

    __tablename__ = "profiles"

    id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        primary_key=True,
    )
    email: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
    )
    full_name: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
    )
    role: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        server_default="member",
        comment="member | manager",
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
    activities: Mapped[list["Activity"]] = relationship(  # noqa: F821
        back_populates="profile",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def display_name(self) -> str:
        return (self.full_name or "").strip() or self.id

    def __repr__(self) -> str:
        return f"<Profile(id={self.id!r}, role={self.role!r})>"
