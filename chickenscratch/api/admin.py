"""Admin-tier endpoints: role management and notification failure log."""
# ruff: noqa: B008

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from chickenscratch.api.deps import get_actor
from chickenscratch.db.engine import get_session
from chickenscratch.notifications.failures import clear_failures, list_failures
from chickenscratch.schemas.admin import ClearFailuresRequest
from chickenscratch.schemas.roles import RoleUpdateRequest
from chickenscratch.security.roles import role_resolver
from chickenscratch.workflow.context import ActorContext
from chickenscratch.workflow.errors import ForbiddenError

router = APIRouter(prefix="/admin", tags=["admin"])


@router.post("/roles")
async def update_role(
    payload: RoleUpdateRequest,
    actor: ActorContext = Depends(get_actor),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    """Create or update a member's role row."""
    record = await role_resolver.update_user_role(
        db, actor.id, actor.capabilities, payload.user_id, payload.updates
    )
    return {
        "success": True,
        "data": {
            "user_id": str(payload.user_id),
            "is_member": record.is_member,
            "roles": list(record.roles),
            "positions": list(record.positions),
        },
    }


@router.get("/users")
async def list_users(
    actor: ActorContext = Depends(get_actor),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    if not actor.capabilities.can_manage_roles:
        raise ForbiddenError()
    return {"data": await role_resolver.list_users_with_roles(db)}


@router.get("/notification-failures")
async def get_notification_failures(
    actor: ActorContext = Depends(get_actor),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    failures = await list_failures(db, actor.capabilities)
    return {"data": [f.to_dict() for f in failures]}


@router.delete("/notification-failures")
async def clear_notification_failures(
    payload: ClearFailuresRequest = Body(...),
    actor: ActorContext = Depends(get_actor),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    removed = await clear_failures(db, actor.id, actor.capabilities, payload.id)
    return {"success": True, "removed": removed}
