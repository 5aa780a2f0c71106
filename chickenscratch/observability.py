"""Structured logging for handled issues.

A handled issue is a failure of a dependent service (email, storage, document
export, audit insert) that is logged for operators and never surfaced to the
caller.

Usage:
    from chickenscratch.observability import log_handled_issue

    log_handled_issue(
        "notifications:status",
        reason="Resend API rejected the message",
        cause=exc,
        context={"submission_id": str(submission.id)},
    )
"""

from __future__ import annotations

import json
import re
from typing import Any

import structlog

_handled = structlog.get_logger("chickenscratch.handled_issue")

_ERROR_KEY = re.compile("error", re.IGNORECASE)


def _normalise_cause(cause: object) -> dict[str, Any]:
    """Flatten an exception (or anything else) into log-friendly fields."""
    if cause is None:
        return {}

    if isinstance(cause, BaseException):
        payload: dict[str, Any] = {}
        name = type(cause).__name__
        if name != "Exception":
            payload["cause_name"] = name
        message = str(cause)
        if message:
            payload["cause_message"] = message
        return payload

    if isinstance(cause, str):
        return {"cause_message": cause}

    try:
        return {"cause_summary": json.dumps(cause, default=str)}
    except (TypeError, ValueError):
        return {"cause_summary": repr(cause)}


def handled_issue_fields(
    scope: str,
    reason: str | None = None,
    cause: object = None,
    context: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Build the structured payload for a handled issue.

    Context keys mentioning "error" are renamed to "issue" so log-based
    alerting on error keys only fires for real errors.
    """
    payload: dict[str, Any] = {"scope": scope}
    if reason:
        payload["reason"] = reason

    for key, value in (context or {}).items():
        if value is None:
            continue
        payload[_ERROR_KEY.sub("issue", key)] = value

    payload.update(_normalise_cause(cause))
    return payload


def log_handled_issue(
    scope: str,
    reason: str | None = None,
    cause: object = None,
    context: dict[str, Any] | None = None,
) -> None:
    """Log a non-fatal dependent-service failure as a structured warning."""
    _handled.warning("handled_issue", **handled_issue_fields(scope, reason, cause, context))
