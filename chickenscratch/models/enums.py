"""Domain enums used across SQLAlchemy models and Pydantic schemas.

All enums use str mixin for JSON serialization; columns store `.value`.
"""

from __future__ import annotations

from enum import Enum


class SubmissionType(str, Enum):
    """What kind of piece was submitted: drives content validation."""

    WRITING = "writing"
    VISUAL = "visual"


class SubmissionStatus(str, Enum):
    """Review lifecycle of a submission."""

    SUBMITTED = "submitted"
    IN_REVIEW = "in_review"
    NEEDS_REVISION = "needs_revision"
    ACCEPTED = "accepted"
    DECLINED = "declined"
    PUBLISHED = "published"


# Owners may edit content only while the piece is in one of these states
EDITABLE_STATUSES: frozenset[SubmissionStatus] = frozenset({
    SubmissionStatus.SUBMITTED,
    SubmissionStatus.NEEDS_REVISION,
})

# Targets accepted by the status-change operation
REVIEW_TARGET_STATUSES: frozenset[SubmissionStatus] = frozenset({
    SubmissionStatus.IN_REVIEW,
    SubmissionStatus.NEEDS_REVISION,
    SubmissionStatus.ACCEPTED,
    SubmissionStatus.DECLINED,
})

# Transitions that record a decision date
DECISION_STATUSES: frozenset[SubmissionStatus] = frozenset({
    SubmissionStatus.NEEDS_REVISION,
    SubmissionStatus.ACCEPTED,
    SubmissionStatus.DECLINED,
})


class CoarseRole(str, Enum):
    """Coarse club roles stored in user_roles.roles."""

    OFFICER = "officer"
    COMMITTEE = "committee"


class Position(str, Enum):
    """Named club positions stored in user_roles.positions."""

    BBEG = "BBEG"
    DICTATOR_IN_CHIEF = "Dictator-in-Chief"
    SCROLL_GREMLIN = "Scroll Gremlin"
    CHIEF_HOARDER = "Chief Hoarder"
    PR_NIGHTMARE = "PR Nightmare"
    SUBMISSIONS_COORDINATOR = "Submissions Coordinator"
    PROOFREADER = "Proofreader"
    LEAD_DESIGN = "Lead Design"
    EDITOR_IN_CHIEF = "Editor-in-Chief"


class LegacyRole(str, Enum):
    """Single-role field on profiles, predating the multi-role model."""

    STUDENT = "student"
    EDITOR = "editor"
    ADMIN = "admin"


class AuditAction(str, Enum):
    """Actions recorded in the audit_log table."""

    CREATE = "create"
    EDIT = "edit"
    ASSIGN = "assign"
    NOTE = "note"
    STATUS_CHANGE = "status_change"
    PUBLISH = "publish"
    SUBMISSION_DELETED = "submission_deleted"
    CONVERT_TO_GDOC = "convert_to_gdoc"


class EmailTemplate(str, Enum):
    """Transactional email templates."""

    NEEDS_REVISION = "needs_revision"
    ACCEPTED = "accepted"
    DECLINED = "declined"
    NEW_SUBMISSION = "new_submission"


class PageView(str, Enum):
    """Cached portal views that can show a submission."""

    MINE = "/mine"
    EDITOR = "/editor"
    COMMITTEE = "/committee"
    PUBLISHED = "/published"
