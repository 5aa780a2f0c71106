"""Security module: access guards, role resolution, audit, rate limiting."""

from chickenscratch.security.audit import audit_logger
from chickenscratch.security.roles import role_resolver

__all__ = ["audit_logger", "role_resolver"]
