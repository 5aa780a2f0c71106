"""Initial schema: profiles, roles, submissions, audit and failure logs.

Revision ID: 001
Revises: None
Create Date: 2026-10-19
"""
from __future__ import annotations

from typing import Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, tuple[str, ...], None] = None
depends_on: Union[str, tuple[str, ...], None] = None


def _id() -> sa.Column:
    return sa.Column(
        "id", postgresql.UUID(as_uuid=True), server_default=sa.text("gen_random_uuid()"), nullable=False
    )


def _created_at() -> sa.Column:
    return sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False)


def _updated_at() -> sa.Column:
    return sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False)


def upgrade() -> None:
    # ── Append-only tables (no FKs) ────────────────────────────────────

    op.create_table(
        "admin_access",
        sa.Column("admin_id", postgresql.UUID(as_uuid=True), nullable=False, index=True),
        sa.Column("action", sa.String(100), nullable=False),
        sa.Column("target_entity", sa.String(50), comment="Table/model name"),
        sa.Column("target_id", postgresql.UUID(as_uuid=True)),
        sa.Column("details", postgresql.JSONB(astext_type=sa.Text())),
        _id(),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
    )

    # submission_id has no FK: audit rows outlive deleted submissions
    op.create_table(
        "audit_log",
        sa.Column("submission_id", postgresql.UUID(as_uuid=True), nullable=False, index=True),
        sa.Column("actor_id", postgresql.UUID(as_uuid=True), comment="Profile ID of the actor"),
        sa.Column("action", sa.String(50), nullable=False, index=True, comment="AuditAction value"),
        sa.Column("details", postgresql.JSONB(astext_type=sa.Text())),
        _id(),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "notification_failures",
        sa.Column("submission_id", postgresql.UUID(as_uuid=True), index=True),
        sa.Column("template", sa.String(50), nullable=False, comment="EmailTemplate value"),
        sa.Column("recipients", postgresql.ARRAY(sa.String(255))),
        sa.Column("error", sa.Text(), nullable=False),
        sa.Column("attempts", sa.Integer(), nullable=False),
        _id(),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
    )

    # ── Profiles and roles ─────────────────────────────────────────────

    op.create_table(
        "profiles",
        sa.Column("external_id", sa.String(255), nullable=False, unique=True, index=True),
        sa.Column("email", sa.String(255), index=True),
        sa.Column("name", sa.String(200)),
        sa.Column("full_name", sa.String(200)),
        sa.Column("role", sa.String(20), server_default="student"),
        _id(),
        _created_at(),
        _updated_at(),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "user_roles",
        sa.Column(
            "user_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("profiles.id", ondelete="CASCADE"),
            nullable=False,
            unique=True,
            index=True,
        ),
        sa.Column("is_member", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("roles", postgresql.ARRAY(sa.String(20)), comment="CoarseRole values"),
        sa.Column("positions", postgresql.ARRAY(sa.String(50)), comment="Position values"),
        _id(),
        _created_at(),
        _updated_at(),
        sa.PrimaryKeyConstraint("id"),
    )

    # ── Submissions ────────────────────────────────────────────────────

    op.create_table(
        "submissions",
        sa.Column("owner_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("profiles.id"), nullable=False, index=True),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("type", sa.String(20), nullable=False, comment="SubmissionType value"),
        sa.Column("genre", sa.String(120)),
        sa.Column("summary", sa.String(500)),
        sa.Column("content_warnings", sa.String(500)),
        sa.Column("word_count", sa.Integer()),
        sa.Column("text_body", sa.Text()),
        sa.Column("file_url", sa.Text(), comment="Storage path of the uploaded manuscript"),
        sa.Column("file_name", sa.String(255)),
        sa.Column("art_files", postgresql.JSONB(astext_type=sa.Text()), comment="Storage paths"),
        sa.Column("cover_image", sa.Text()),
        sa.Column("status", sa.String(20), nullable=False, server_default="submitted", index=True),
        sa.Column("assigned_editor", postgresql.UUID(as_uuid=True), sa.ForeignKey("profiles.id")),
        sa.Column("editor_notes", sa.Text()),
        sa.Column("decision_date", sa.DateTime(timezone=True)),
        sa.Column("google_docs_link", sa.Text()),
        sa.Column("published", sa.Boolean(), nullable=False, server_default=sa.false(), index=True),
        sa.Column("volume", sa.Integer()),
        sa.Column("issue_number", sa.Integer()),
        sa.Column("publish_date", sa.Date()),
        sa.Column("issue", sa.String(120), comment="Human label, e.g. 'Vol. 3, No. 2'"),
        sa.Column("published_html", sa.Text()),
        _id(),
        _created_at(),
        _updated_at(),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint(
            "status IN ('submitted', 'in_review', 'needs_revision', 'accepted', 'declined', 'published')",
            name="ck_submissions_status",
        ),
        sa.CheckConstraint("NOT published OR status = 'published'", name="ck_submissions_published_status"),
    )


def downgrade() -> None:
    # Drop in reverse dependency order
    op.drop_table("submissions")
    op.drop_table("user_roles")
    op.drop_table("profiles")
    op.drop_table("notification_failures")
    op.drop_table("audit_log")
    op.drop_table("admin_access")
