"""Submission model: a piece of writing or visual art moving through review.

The id is chosen by the client so uploads can be stored under the owner's
prefix before the row exists. `published` is only ever set together with
status=published.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Any

from sqlalchemy import Boolean, CheckConstraint, Date, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from chickenscratch.models.base import Base, TimestampMixin
from chickenscratch.models.enums import SubmissionStatus


class Submission(TimestampMixin, Base):
    """A zine submission and its review/publication state."""

    __tablename__ = "submissions"
    __table_args__ = (
        CheckConstraint(
            "status IN ('submitted', 'in_review', 'needs_revision', 'accepted', 'declined', 'published')",
            name="ck_submissions_status",
        ),
        CheckConstraint("NOT published OR status = 'published'", name="ck_submissions_published_status"),
    )

    owner_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("profiles.id"), nullable=False, index=True
    )

    # Content
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    type: Mapped[str] = mapped_column(String(20), nullable=False, comment="SubmissionType value")
    genre: Mapped[str | None] = mapped_column(String(120))
    summary: Mapped[str | None] = mapped_column(String(500))
    content_warnings: Mapped[str | None] = mapped_column(String(500))
    word_count: Mapped[int | None] = mapped_column(Integer)
    text_body: Mapped[str | None] = mapped_column(Text)
    file_url: Mapped[str | None] = mapped_column(Text, comment="Storage path of the uploaded manuscript")
    file_name: Mapped[str | None] = mapped_column(String(255))
    art_files: Mapped[list[str] | None] = mapped_column(JSONB, default=list, comment="Storage paths")
    cover_image: Mapped[str | None] = mapped_column(Text)

    # Review
    status: Mapped[str] = mapped_column(
        String(20), default=SubmissionStatus.SUBMITTED.value, nullable=False, index=True
    )
    assigned_editor: Mapped[uuid.UUID | None] = mapped_column(UUID(as_uuid=True), ForeignKey("profiles.id"))
    editor_notes: Mapped[str | None] = mapped_column(Text)
    decision_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    google_docs_link: Mapped[str | None] = mapped_column(Text)

    # Publication
    published: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False, index=True)
    volume: Mapped[int | None] = mapped_column(Integer)
    issue_number: Mapped[int | None] = mapped_column(Integer)
    publish_date: Mapped[date | None] = mapped_column(Date)
    issue: Mapped[str | None] = mapped_column(String(120), comment="Human label, e.g. 'Vol. 3, No. 2'")
    published_html: Mapped[str | None] = mapped_column(Text)

    def file_references(self) -> list[str]:
        """All distinct storage paths this submission points at, in stable order."""
        refs: list[str] = []
        for path in [*(self.art_files or []), self.cover_image, self.file_url]:
            if path and path not in refs:
                refs.append(path)
        return refs

    def to_dict(self) -> dict[str, Any]:
        """Serialize for API responses."""
        return {
            "id": str(self.id),
            "owner_id": str(self.owner_id),
            "title": self.title,
            "type": self.type,
            "genre": self.genre,
            "summary": self.summary,
            "content_warnings": self.content_warnings,
            "word_count": self.word_count,
            "text_body": self.text_body,
            "art_files": list(self.art_files or []),
            "cover_image": self.cover_image,
            "status": self.status,
            "assigned_editor": str(self.assigned_editor) if self.assigned_editor else None,
            "editor_notes": self.editor_notes,
            "decision_date": self.decision_date.isoformat() if self.decision_date else None,
            "google_docs_link": self.google_docs_link,
            "published": self.published,
            "volume": self.volume,
            "issue_number": self.issue_number,
            "publish_date": self.publish_date.isoformat() if self.publish_date else None,
            "issue": self.issue,
            "published_html": self.published_html,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self) -> str:
        return f"<Submission id={self.id} status={self.status} published={self.published}>"
