"""AdminAccess model: admin-tier actions that are not tied to a submission."""

from __future__ import annotations

import uuid

from sqlalchemy import String
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from chickenscratch.models.base import AppendOnlyMixin, Base


class AdminAccess(AppendOnlyMixin, Base):
    """Record of an admin action (role update, failure-log cleanup, ...)."""

    __tablename__ = "admin_access"

    admin_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False, index=True)
    action: Mapped[str] = mapped_column(String(100), nullable=False)

    # What was the target
    target_entity: Mapped[str | None] = mapped_column(String(50), comment="Table/model name")
    target_id: Mapped[uuid.UUID | None] = mapped_column(UUID(as_uuid=True))

    details: Mapped[dict | None] = mapped_column(JSONB)

    def __repr__(self) -> str:
        return f"<AdminAccess admin={self.admin_id} action={self.action}>"
