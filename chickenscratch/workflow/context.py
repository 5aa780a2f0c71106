"""Per-request actor context: who is calling and what they may do."""

from __future__ import annotations

import uuid
from dataclasses import dataclass

from chickenscratch.models.profile import Profile
from chickenscratch.schemas.roles import RoleRecord
from chickenscratch.security.guards import Capabilities


@dataclass(frozen=True)
class ActorContext:
    """Resolved fresh on every request; never cached across requests."""

    profile: Profile
    role: RoleRecord
    capabilities: Capabilities

    @property
    def id(self) -> uuid.UUID:
        return self.profile.id
