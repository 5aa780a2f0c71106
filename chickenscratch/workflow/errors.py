"""Domain errors raised by the submission workflow.

Each error carries the HTTP status it maps to. The API layer turns them into
`{"error": message}` responses; nothing here knows about FastAPI.
"""

from __future__ import annotations

from typing import Any


class WorkflowError(Exception):
    """Base class for expected, caller-visible workflow failures."""

    status_code: int = 400
    default_message: str = "Bad request"

    def __init__(self, message: str | None = None, *, fields: list[dict[str, Any]] | None = None) -> None:
        self.message = message or self.default_message
        self.fields = fields
        super().__init__(self.message)


class AuthenticationError(WorkflowError):
    """No resolvable actor."""

    status_code = 401
    default_message = "Unauthorized"


class ForbiddenError(WorkflowError):
    """Authenticated but not allowed. Never names the role that would suffice."""

    status_code = 403
    default_message = "Forbidden"


class NotEditableError(ForbiddenError):
    default_message = "This submission is no longer editable."


class NotFoundError(WorkflowError):
    status_code = 404
    default_message = "Submission not found."


class ValidationFailedError(WorkflowError):
    """Malformed or out-of-range payload."""

    default_message = "Invalid payload."


class NotesRequiredError(ValidationFailedError):
    default_message = "Editor notes are required for revisions."


class InvalidFilePathError(ValidationFailedError):
    default_message = "Invalid file path."


class DependencyUnavailableError(WorkflowError):
    """An integration the operation cannot work without is not configured."""

    status_code = 503
    default_message = "Service not configured"


class DependencyFailedError(WorkflowError):
    """An integration the operation depends on returned an error."""

    status_code = 502
    default_message = "Upstream service failed"


class RateLimitedError(WorkflowError):
    """Too many submissions in the current window."""

    status_code = 429

    def __init__(self, limit: int, retry_after: int) -> None:
        super().__init__(f"You can only submit {limit} pieces per hour. Please try again later.")
        self.retry_after = retry_after
