"""Role resolver: maps an actor to membership, coarse roles, and positions.

Roles are always read fresh from user_roles; nothing is cached, so a
revocation takes effect on the very next request.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from chickenscratch.models.admin_access import AdminAccess
from chickenscratch.models.profile import Profile
from chickenscratch.models.user_role import UserRole
from chickenscratch.schemas.roles import RoleRecord, RoleUpdates
from chickenscratch.security.guards import Capabilities
from chickenscratch.workflow.errors import ForbiddenError

logger = logging.getLogger(__name__)


def _to_record(row: UserRole | None) -> RoleRecord:
    if row is None:
        return RoleRecord.empty()
    return RoleRecord(
        is_member=bool(row.is_member),
        roles=tuple(row.roles or ()),
        positions=tuple(row.positions or ()),
    )


class RoleResolver:
    """Stateless role operations: AsyncSession passed per call."""

    async def get_user_role(self, db: AsyncSession, user_id: uuid.UUID) -> RoleRecord:
        """Return the actor's role record, or an empty record when none exists."""
        result = await db.execute(select(UserRole).where(UserRole.user_id == user_id))
        return _to_record(result.scalar_one_or_none())

    async def update_user_role(
        self,
        db: AsyncSession,
        actor_id: uuid.UUID,
        capabilities: Capabilities,
        user_id: uuid.UUID,
        updates: RoleUpdates,
    ) -> RoleRecord:
        """Create or update a user's role row. Admin tier only.

        Only the fields present in `updates` are written. Every change is
        recorded in admin_access.
        """
        if not capabilities.can_manage_roles:
            raise ForbiddenError()

        values = updates.column_values()

        result = await db.execute(select(UserRole).where(UserRole.user_id == user_id))
        row = result.scalar_one_or_none()
        if row is None:
            row = UserRole(
                user_id=user_id,
                is_member=bool(values.get("is_member", False)),
                roles=values.get("roles", []),
                positions=values.get("positions", []),
            )
            db.add(row)
            action = "role_created"
        else:
            for column, value in values.items():
                setattr(row, column, value)
            action = "role_updated"

        db.add(AdminAccess(
            admin_id=actor_id,
            action=action,
            target_entity="user_roles",
            target_id=user_id,
            details=dict(values),
        ))
        await db.flush()

        logger.info("Role %s: user=%s by=%s fields=%s", action, user_id, actor_id, sorted(values))
        return _to_record(row)

    async def list_users_with_roles(self, db: AsyncSession) -> list[dict[str, Any]]:
        """All profiles with their role rows (empty roles when none), for admin tooling."""
        result = await db.execute(
            select(Profile, UserRole)
            .outerjoin(UserRole, UserRole.user_id == Profile.id)
            .order_by(Profile.created_at.desc())
        )
        users: list[dict[str, Any]] = []
        for profile, row in result.all():
            record = _to_record(row)
            users.append({
                "id": str(profile.id),
                "email": profile.email,
                "display_name": profile.full_name or profile.name,
                "is_member": record.is_member,
                "roles": list(record.roles),
                "positions": list(record.positions),
            })
        return users


# Module-level singleton
role_resolver = RoleResolver()
