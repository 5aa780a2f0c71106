"""Exception handlers: every error leaves the API as `{"error": message}`."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from chickenscratch.workflow.errors import RateLimitedError, WorkflowError

logger = logging.getLogger(__name__)

# Route name -> payload label used in validation messages
_PAYLOAD_LABELS: dict[str, str] = {
    "create_submission": "submission",
    "edit_submission": "update",
    "assign_editor": "assignment",
    "set_editor_notes": "notes",
    "change_status": "status",
    "publish_submission": "publish",
    "update_role": "role",
    "clear_notification_failures": "request",
}


def _validation_fields(exc: RequestValidationError) -> list[dict[str, Any]]:
    fields: list[dict[str, Any]] = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part != "body"]
        fields.append({"field": ".".join(loc), "message": err.get("msg", "Invalid value")})
    return fields


def _payload_message(request: Request) -> str:
    route = request.scope.get("route")
    label = _PAYLOAD_LABELS.get(getattr(route, "name", ""), "request")
    return f"Invalid {label} payload."


async def workflow_error_handler(request: Request, exc: WorkflowError) -> JSONResponse:
    body: dict[str, Any] = {"error": exc.message}
    if exc.fields:
        body["fields"] = exc.fields
    headers = None
    if isinstance(exc, RateLimitedError):
        headers = {"Retry-After": str(exc.retry_after)}
    if exc.status_code >= 500:
        logger.warning("%s %s -> %d: %s", request.method, request.url.path, exc.status_code, exc.message)
    return JSONResponse(status_code=exc.status_code, content=body, headers=headers)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": _payload_message(request), "fields": _validation_fields(exc)},
    )


async def http_error_handler(request: Request, exc: HTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(WorkflowError, workflow_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(HTTPException, http_error_handler)
