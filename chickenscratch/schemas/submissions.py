"""Pydantic request schemas for the submission workflow endpoints.

Every body is camelCase on the wire, snake_case in Python, and rejects
unknown fields. Partial updates rely on `model_fields_set` so an omitted
field is never confused with an explicit null.
"""

from __future__ import annotations

import uuid
from datetime import date

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from chickenscratch.models.enums import REVIEW_TARGET_STATUSES, SubmissionStatus, SubmissionType

MAX_ART_FILES = 5


class _Request(BaseModel):
    model_config = ConfigDict(
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )


class _SubmissionContent(_Request):
    """Content fields shared by create and edit."""

    genre: str | None = Field(default=None, max_length=120)
    summary: str | None = Field(default=None, max_length=500)
    content_warnings: str | None = Field(default=None, max_length=500)
    word_count: int | None = Field(default=None, ge=0, le=50000)
    text_body: str | None = Field(default=None, max_length=50000)
    file_url: str | None = None
    file_name: str | None = Field(default=None, max_length=255)
    cover_image: str | None = None

    def file_paths(self) -> list[str]:
        """Every storage path referenced by this payload."""
        paths = list(getattr(self, "art_files", None) or [])
        paths.extend(p for p in (self.cover_image, self.file_url) if p)
        return paths


class SubmissionCreate(_SubmissionContent):
    """Body of POST /submissions."""

    # Client-chosen so uploads can land under {owner_id}/ before the row exists
    id: uuid.UUID | None = None
    title: str = Field(min_length=3, max_length=200)
    type: SubmissionType
    art_files: list[str] = Field(default_factory=list, max_length=MAX_ART_FILES)

    @model_validator(mode="after")
    def check_type_content(self) -> SubmissionCreate:
        """Writing needs a text body; visual art needs 1 to 5 files."""
        if self.type is SubmissionType.WRITING and not self.text_body:
            msg = "Writing submissions require a text body"
            raise ValueError(msg)
        if self.type is SubmissionType.VISUAL and not self.art_files:
            msg = "Visual submissions require at least one art file"
            raise ValueError(msg)
        return self


class SubmissionUpdate(_SubmissionContent):
    """Body of PATCH /submissions/{id}. Only fields sent are written."""

    title: str | None = Field(default=None, min_length=3, max_length=200)
    type: SubmissionType | None = None
    art_files: list[str] | None = Field(default=None, max_length=MAX_ART_FILES)

    @field_validator("title", "type", "art_files")
    @classmethod
    def not_null(cls, v: object) -> object:
        if v is None:
            msg = "Field cannot be null"
            raise ValueError(msg)
        return v


class AssignRequest(_Request):
    """Body of POST /submissions/{id}/assign. `editorId` is required but may be null."""

    editor_id: uuid.UUID | None


class NotesRequest(_Request):
    editor_notes: str | None = Field(default=None, max_length=4000)


class StatusChangeRequest(_Request):
    """Body of POST /submissions/{id}/status."""

    status: SubmissionStatus
    editor_notes: str | None = Field(default=None, max_length=4000)

    @field_validator("status")
    @classmethod
    def review_target(cls, v: SubmissionStatus) -> SubmissionStatus:
        if v not in REVIEW_TARGET_STATUSES:
            msg = f"Status must be one of {sorted(s.value for s in REVIEW_TARGET_STATUSES)}"
            raise ValueError(msg)
        return v


class PublishRequest(_Request):
    """Body of POST /submissions/{id}/publish."""

    volume: int = Field(gt=0)
    issue_number: int = Field(gt=0)
    publish_date: date

    @property
    def issue_label(self) -> str:
        return f"Vol. {self.volume}, No. {self.issue_number}"
