"""Profile model: the local record of an identity-provider account.

Created on first authenticated request. The legacy single `role` column is
kept for the status-change fallback; the authoritative role model lives in
user_roles.
"""

from __future__ import annotations

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from chickenscratch.models.base import Base, TimestampMixin
from chickenscratch.models.enums import LegacyRole


class Profile(TimestampMixin, Base):
    """A person known to the portal (student, editor, officer)."""

    __tablename__ = "profiles"

    # Identity-provider subject ("sub" claim)
    external_id: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)

    email: Mapped[str | None] = mapped_column(String(255), index=True)
    name: Mapped[str | None] = mapped_column(String(200))
    full_name: Mapped[str | None] = mapped_column(String(200))
    role: Mapped[str] = mapped_column(String(20), default=LegacyRole.STUDENT.value)

    @property
    def display_name(self) -> str:
        """Best available human name for emails and listings."""
        return self.full_name or self.name or self.email or "Unknown Author"

    def __repr__(self) -> str:
        return f"<Profile id={self.id} role={self.role}>"
