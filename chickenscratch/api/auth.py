"""Bearer-token authentication against the identity provider's signed JWTs.

The identity provider owns sign-in; this service only verifies the token
and maps its `sub` claim to a local profile, creating one on first sight.
"""

from __future__ import annotations

import logging
from typing import Any

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from chickenscratch.config import settings
from chickenscratch.db.engine import get_session
from chickenscratch.models.enums import LegacyRole
from chickenscratch.models.profile import Profile
from chickenscratch.workflow.errors import AuthenticationError

logger = logging.getLogger(__name__)

bearer = HTTPBearer(auto_error=False)


def decode_token(token: str) -> dict[str, Any]:
    """Verify signature, expiry and (if configured) audience.

    Raises:
        AuthenticationError: token invalid, expired, or has no subject.
    """
    secret = settings.security.jwt_secret
    if not secret:
        logger.error("SECURITY_JWT_SECRET not configured, rejecting all tokens")
        raise AuthenticationError()

    audience = settings.security.jwt_audience or None
    try:
        claims = jwt.decode(
            token,
            secret,
            algorithms=[settings.security.jwt_algorithm],
            audience=audience,
            options={"verify_aud": audience is not None},
        )
    except jwt.ExpiredSignatureError as exc:
        logger.debug("Rejected expired token")
        raise AuthenticationError() from exc
    except jwt.InvalidTokenError as exc:
        logger.debug("Rejected invalid token: %s", exc)
        raise AuthenticationError() from exc

    if not claims.get("sub"):
        raise AuthenticationError()
    return claims


async def get_or_create_profile(db: AsyncSession, claims: dict[str, Any]) -> Profile:
    """Return the profile for the token subject, creating it on first request."""
    result = await db.execute(select(Profile).where(Profile.external_id == claims["sub"]))
    profile = result.scalar_one_or_none()
    if profile is not None:
        return profile

    profile = Profile(
        external_id=claims["sub"],
        email=claims.get("email"),
        name=claims.get("name"),
        full_name=claims.get("full_name") or claims.get("name"),
        role=LegacyRole.STUDENT.value,
    )
    db.add(profile)
    await db.flush()
    logger.info("Profile created for new subject: id=%s", profile.id)
    return profile


async def get_current_profile(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer),  # noqa: B008
    db: AsyncSession = Depends(get_session),  # noqa: B008
) -> Profile:
    """FastAPI dependency: authenticated caller's profile, or 401."""
    if credentials is None or not credentials.credentials:
        raise AuthenticationError()
    claims = decode_token(credentials.credentials)
    return await get_or_create_profile(db, claims)
