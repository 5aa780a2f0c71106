"""Audit log writer: one append-only row per submission mutation.

The row is written inside a SAVEPOINT of the mutation's own transaction.
If the insert fails, only the savepoint is rolled back: the mutation still
commits and the failure is logged as a handled issue. Audit is advisory.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from chickenscratch.models.audit import AuditLog
from chickenscratch.models.enums import AuditAction
from chickenscratch.observability import log_handled_issue

logger = logging.getLogger(__name__)


class AuditLogger:
    """Writes audit entries. Never raises."""

    async def record(
        self,
        db: AsyncSession,
        submission_id: uuid.UUID,
        actor_id: uuid.UUID | None,
        action: AuditAction,
        details: dict[str, Any] | None = None,
    ) -> AuditLog | None:
        """Append an audit row for a mutation that has already been flushed.

        Returns the entry, or None when the write failed.
        """
        entry = AuditLog(
            submission_id=submission_id,
            actor_id=actor_id,
            action=action.value,
            details=details or {},
        )
        try:
            async with db.begin_nested():
                db.add(entry)
        except SQLAlchemyError as exc:
            log_handled_issue(
                "audit:write",
                reason="Failed to persist audit entry",
                cause=exc,
                context={"submission_id": str(submission_id), "action": action.value},
            )
            return None

        logger.debug("Audit %s: submission=%s actor=%s", action.value, submission_id, actor_id)
        return entry


# Module-level singleton
audit_logger = AuditLogger()
