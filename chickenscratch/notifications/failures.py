"""Admin queries over undelivered notifications."""

from __future__ import annotations

import logging
import uuid

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from chickenscratch.models.admin_access import AdminAccess
from chickenscratch.models.notification_failure import NotificationFailure
from chickenscratch.security.guards import Capabilities
from chickenscratch.workflow.errors import ForbiddenError

logger = logging.getLogger(__name__)


async def list_failures(db: AsyncSession, capabilities: Capabilities, limit: int = 100) -> list[NotificationFailure]:
    """Most recent failures first."""
    if not capabilities.can_manage_roles:
        raise ForbiddenError()
    result = await db.execute(
        select(NotificationFailure).order_by(NotificationFailure.created_at.desc()).limit(limit)
    )
    return list(result.scalars().all())


async def clear_failures(
    db: AsyncSession,
    actor_id: uuid.UUID,
    capabilities: Capabilities,
    failure_id: uuid.UUID | None = None,
) -> int:
    """Delete one failure by id, or all of them when `failure_id` is None.

    Returns the number of rows removed.
    """
    if not capabilities.can_manage_roles:
        raise ForbiddenError()

    stmt = delete(NotificationFailure)
    if failure_id is not None:
        stmt = stmt.where(NotificationFailure.id == failure_id)
    result = await db.execute(stmt)
    removed = result.rowcount or 0

    db.add(AdminAccess(
        admin_id=actor_id,
        action="notification_failures_cleared",
        target_entity="notification_failures",
        target_id=failure_id,
        details={"all": failure_id is None, "removed": removed},
    ))
    await db.flush()

    logger.info("Cleared %d notification failure(s) by=%s", removed, actor_id)
    return removed
