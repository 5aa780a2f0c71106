"""UserRole model: club membership, coarse roles, and named positions."""

from __future__ import annotations

import uuid

from sqlalchemy import Boolean, ForeignKey, String
from sqlalchemy.dialects.postgresql import ARRAY, UUID
from sqlalchemy.orm import Mapped, mapped_column

from chickenscratch.models.base import Base, TimestampMixin


class UserRole(TimestampMixin, Base):
    """Role assignment for one profile (at most one row per user)."""

    __tablename__ = "user_roles"

    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("profiles.id", ondelete="CASCADE"), unique=True, index=True, nullable=False
    )
    is_member: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    roles: Mapped[list[str]] = mapped_column(ARRAY(String(20)), default=list, comment="CoarseRole values")
    positions: Mapped[list[str]] = mapped_column(ARRAY(String(50)), default=list, comment="Position values")

    def __repr__(self) -> str:
        return f"<UserRole user={self.user_id} member={self.is_member} roles={self.roles}>"
