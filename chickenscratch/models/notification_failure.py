"""NotificationFailure model: emails that could not be delivered after retries."""

from __future__ import annotations

import uuid

from sqlalchemy import Integer, String, Text
from sqlalchemy.dialects.postgresql import ARRAY, UUID
from sqlalchemy.orm import Mapped, mapped_column

from chickenscratch.models.base import AppendOnlyMixin, Base


class NotificationFailure(AppendOnlyMixin, Base):
    """One undelivered notification, kept for operators to inspect and clear."""

    __tablename__ = "notification_failures"

    submission_id: Mapped[uuid.UUID | None] = mapped_column(UUID(as_uuid=True), index=True)
    template: Mapped[str] = mapped_column(String(50), nullable=False, comment="EmailTemplate value")
    recipients: Mapped[list[str]] = mapped_column(ARRAY(String(255)), default=list)
    error: Mapped[str] = mapped_column(Text, nullable=False)
    attempts: Mapped[int] = mapped_column(Integer, default=1, nullable=False)

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "submission_id": str(self.submission_id) if self.submission_id else None,
            "template": self.template,
            "recipients": list(self.recipients or []),
            "error": self.error,
            "attempts": self.attempts,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self) -> str:
        return f"<NotificationFailure template={self.template} submission={self.submission_id}>"
