"""Request-scoped dependencies: actor context, role gates, rate limiter."""
# ruff: noqa: B008

from __future__ import annotations

from collections.abc import Awaitable, Callable

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from chickenscratch.api.auth import get_current_profile
from chickenscratch.config import settings
from chickenscratch.db.engine import get_session
from chickenscratch.models.profile import Profile
from chickenscratch.security.guards import resolve_capabilities, role_satisfies
from chickenscratch.security.rate_limiter import RateLimiter
from chickenscratch.security.roles import role_resolver
from chickenscratch.workflow.context import ActorContext
from chickenscratch.workflow.errors import ForbiddenError


async def get_actor(
    profile: Profile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_session),
) -> ActorContext:
    """Resolve roles fresh and compute capabilities for this request."""
    role = await role_resolver.get_user_role(db, profile.id)
    capabilities = resolve_capabilities(
        role,
        legacy_role=profile.role,
        allow_legacy=settings.security.legacy_role_fallback,
    )
    return ActorContext(profile=profile, role=role, capabilities=capabilities)


def require_role(required: str) -> Callable[..., Awaitable[ActorContext]]:
    """Dependency factory gating a route on `committee` / `editor` membership.

    Usage:
        @router.get("/queue")
        async def queue(actor: ActorContext = Depends(require_role("editor"))): ...
    """

    async def dependency(actor: ActorContext = Depends(get_actor)) -> ActorContext:
        if not role_satisfies(required, actor.role):
            raise ForbiddenError()
        return actor

    return dependency


def get_rate_limiter(request: Request) -> RateLimiter:
    """The limiter built once at startup and stored on app.state."""
    return request.app.state.rate_limiter
