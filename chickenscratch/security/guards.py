"""Access guard: pure functions deciding what a role set may do.

Every function here is total: `None` or empty role/position lists mean
"no access", never an error. Denial is a normal False outcome.

The per-request entry point is `resolve_capabilities()`, which turns one
resolved role record into a closed set of boolean capabilities. Handlers
check a capability flag instead of re-deriving tiers from string lists.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from chickenscratch.models.enums import CoarseRole, LegacyRole, Position
from chickenscratch.schemas.roles import RoleRecord

OFFICER_POSITIONS: frozenset[str] = frozenset({
    Position.BBEG.value,
    Position.DICTATOR_IN_CHIEF.value,
    Position.SCROLL_GREMLIN.value,
    Position.CHIEF_HOARDER.value,
    Position.PR_NIGHTMARE.value,
})

COMMITTEE_POSITIONS: frozenset[str] = frozenset({
    Position.SUBMISSIONS_COORDINATOR.value,
    Position.PROOFREADER.value,
    Position.LEAD_DESIGN.value,
    Position.EDITOR_IN_CHIEF.value,
})

# The two top officer positions; the only ones allowed to delete or manage roles
ADMIN_POSITIONS: frozenset[str] = frozenset({
    Position.BBEG.value,
    Position.DICTATOR_IN_CHIEF.value,
})

LEGACY_REVIEW_ROLES: frozenset[str] = frozenset({LegacyRole.EDITOR.value, LegacyRole.ADMIN.value})


def _as_set(values: Iterable[str] | None) -> set[str]:
    return {str(getattr(v, "value", v)) for v in values} if values else set()


def has_officer_access(positions: Iterable[str] | None, roles: Iterable[str] | None) -> bool:
    """True if any position is officer-tier or the coarse `officer` role is held."""
    return bool(_as_set(positions) & OFFICER_POSITIONS) or CoarseRole.OFFICER.value in _as_set(roles)


def has_committee_access(positions: Iterable[str] | None, roles: Iterable[str] | None) -> bool:
    """True if any position is committee-tier or the coarse `committee` role is held."""
    return bool(_as_set(positions) & COMMITTEE_POSITIONS) or CoarseRole.COMMITTEE.value in _as_set(roles)


def has_editor_access(positions: Iterable[str] | None, roles: Iterable[str] | None) -> bool:
    """True for the Editor-in-Chief position or the coarse `committee` role."""
    return Position.EDITOR_IN_CHIEF.value in _as_set(positions) or CoarseRole.COMMITTEE.value in _as_set(roles)


def has_admin_access(positions: Iterable[str] | None) -> bool:
    """True only for the BBEG and Dictator-in-Chief positions."""
    return bool(_as_set(positions) & ADMIN_POSITIONS)


def role_satisfies(required: str, role: RoleRecord) -> bool:
    """Decide a page/route-level role requirement.

    Non-members never pass. Officers pass every requirement. `committee`
    and `editor` requirements pass only for a matching tier.
    """
    if not role.is_member:
        return False
    if has_officer_access(role.positions, role.roles):
        return True
    if required == "committee":
        return has_committee_access(role.positions, role.roles)
    if required == "editor":
        return has_editor_access(role.positions, role.roles)
    return False


@dataclass(frozen=True)
class Capabilities:
    """Closed set of permissions, computed once per request."""

    is_member: bool = False
    officer: bool = False
    committee: bool = False
    editor: bool = False
    editor_in_chief: bool = False
    admin: bool = False
    legacy_reviewer: bool = False

    @property
    def can_change_status(self) -> bool:
        return self.officer or self.committee or self.editor or self.legacy_reviewer

    @property
    def can_assign(self) -> bool:
        return self.editor_in_chief

    @property
    def can_note(self) -> bool:
        return self.editor_in_chief

    @property
    def can_publish(self) -> bool:
        return self.editor_in_chief

    @property
    def can_delete_anything(self) -> bool:
        return self.admin

    @property
    def can_manage_roles(self) -> bool:
        return self.admin

    @property
    def can_convert_documents(self) -> bool:
        return self.is_member and (self.officer or self.committee)

    @property
    def can_view_queue(self) -> bool:
        return self.officer or self.committee or self.editor or self.legacy_reviewer


def resolve_capabilities(
    role: RoleRecord,
    legacy_role: str | None = None,
    allow_legacy: bool = True,
) -> Capabilities:
    """Compute capabilities from a freshly resolved role record.

    Args:
        role: Output of the role resolver (never None).
        legacy_role: The profile's single legacy role, if any.
        allow_legacy: Whether the legacy editor/admin role may review.
    """
    positions, roles = role.positions, role.roles
    legacy_reviewer = allow_legacy and legacy_role in LEGACY_REVIEW_ROLES
    return Capabilities(
        is_member=role.is_member,
        officer=has_officer_access(positions, roles),
        committee=has_committee_access(positions, roles),
        editor=has_editor_access(positions, roles),
        editor_in_chief=Position.EDITOR_IN_CHIEF.value in _as_set(positions),
        admin=has_admin_access(positions),
        legacy_reviewer=legacy_reviewer,
    )


def granted_only_by_legacy(capabilities: Capabilities) -> bool:
    """True when the legacy role is the sole reason status changes are allowed."""
    return capabilities.legacy_reviewer and not (
        capabilities.officer or capabilities.committee or capabilities.editor
    )
