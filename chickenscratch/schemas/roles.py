"""Pydantic schemas for role records and the admin role-update payload."""

from __future__ import annotations

import uuid

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from chickenscratch.models.enums import CoarseRole, Position


class RoleRecord(BaseModel):
    """Resolved role set for one actor.

    The resolver returns `RoleRecord.empty()` when no row exists, so callers
    never need a separate None branch.
    """

    model_config = ConfigDict(frozen=True)

    is_member: bool = False
    roles: tuple[str, ...] = ()
    positions: tuple[str, ...] = ()

    @classmethod
    def empty(cls) -> RoleRecord:
        return cls()


class RoleUpdates(BaseModel):
    """Fields an admin may change on a role row.

    `role` / `position` are the single-value form used by older admin tools;
    they are folded into `roles` / `positions`.
    """

    model_config = ConfigDict(extra="forbid")

    is_member: bool | None = None
    roles: list[CoarseRole] | None = None
    positions: list[Position] | None = None
    role: CoarseRole | None = None
    position: Position | None = None

    @model_validator(mode="after")
    def fold_single_values(self) -> RoleUpdates:
        """Reject ambiguous payloads and fold singular fields into lists."""
        if self.role is not None and self.roles is not None:
            msg = "Send either 'role' or 'roles', not both"
            raise ValueError(msg)
        if self.position is not None and self.positions is not None:
            msg = "Send either 'position' or 'positions', not both"
            raise ValueError(msg)
        if self.role is not None:
            self.roles = [self.role]
            self.role = None
        if self.position is not None:
            self.positions = [self.position]
            self.position = None
        return self

    def column_values(self) -> dict[str, object]:
        """Only the columns actually present in the request."""
        values: dict[str, object] = {}
        if self.is_member is not None:
            values["is_member"] = self.is_member
        if self.roles is not None:
            values["roles"] = list(dict.fromkeys(r.value for r in self.roles))
        if self.positions is not None:
            values["positions"] = list(dict.fromkeys(p.value for p in self.positions))
        return values


class RoleUpdateRequest(BaseModel):
    """Body of POST /admin/roles."""

    model_config = ConfigDict(extra="forbid", alias_generator=to_camel, populate_by_name=True)

    user_id: uuid.UUID
    updates: RoleUpdates = Field(default_factory=RoleUpdates)
