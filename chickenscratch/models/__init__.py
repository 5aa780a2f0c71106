"""SQLAlchemy ORM models for the Chicken Scratch portal.

Import all models here so Alembic and Base.metadata.create_all() discover them.
"""

from __future__ import annotations

from chickenscratch.models.admin_access import AdminAccess
from chickenscratch.models.audit import AuditLog
from chickenscratch.models.base import Base
from chickenscratch.models.enums import (
    AuditAction,
    CoarseRole,
    EmailTemplate,
    LegacyRole,
    PageView,
    Position,
    SubmissionStatus,
    SubmissionType,
)
from chickenscratch.models.notification_failure import NotificationFailure
from chickenscratch.models.profile import Profile
from chickenscratch.models.submission import Submission
from chickenscratch.models.user_role import UserRole

__all__ = [
    # Base
    "Base",
    # Models
    "Profile",
    "UserRole",
    "Submission",
    "AuditLog",
    "AdminAccess",
    "NotificationFailure",
    # Enums
    "SubmissionType",
    "SubmissionStatus",
    "CoarseRole",
    "Position",
    "LegacyRole",
    "AuditAction",
    "EmailTemplate",
    "PageView",
]
