"""AuditLog model: append-only trail of every submission mutation.

`submission_id` deliberately has no foreign key: rows outlive the submission
they describe, so a deleted submission leaves a dangling reference.
"""

from __future__ import annotations

import uuid
from typing import Any

from sqlalchemy import String
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from chickenscratch.models.base import AppendOnlyMixin, Base


class AuditLog(AppendOnlyMixin, Base):
    """Immutable audit trail entry."""

    __tablename__ = "audit_log"

    submission_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False, index=True)
    actor_id: Mapped[uuid.UUID | None] = mapped_column(UUID(as_uuid=True), comment="Profile ID of the actor")
    action: Mapped[str] = mapped_column(String(50), nullable=False, index=True, comment="AuditAction value")

    # Action-specific payload, e.g. {"from": ..., "to": ...} for status_change
    details: Mapped[dict[str, Any] | None] = mapped_column(JSONB)

    def __repr__(self) -> str:
        return f"<AuditLog action={self.action} submission={self.submission_id}>"
