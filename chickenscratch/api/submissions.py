"""Submission endpoints: owner create/edit, editorial transitions, reads."""
# ruff: noqa: B008

from __future__ import annotations

import uuid
from typing import Any

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from chickenscratch.api.deps import get_actor, get_rate_limiter, require_role
from chickenscratch.db.engine import get_session
from chickenscratch.models.enums import SubmissionStatus
from chickenscratch.schemas.submissions import (
    AssignRequest,
    NotesRequest,
    PublishRequest,
    StatusChangeRequest,
    SubmissionCreate,
    SubmissionUpdate,
)
from chickenscratch.security.rate_limiter import RateLimiter
from chickenscratch.workflow.context import ActorContext
from chickenscratch.workflow.service import submission_workflow

router = APIRouter(prefix="/submissions", tags=["submissions"])

_OK: dict[str, bool] = {"success": True}


# ── Reads ────────────────────────────────────────────────────────────


@router.get("/mine")
async def list_my_submissions(
    actor: ActorContext = Depends(get_actor),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    submissions = await submission_workflow.list_mine(db, actor)
    return {"data": [s.to_dict() for s in submissions]}


@router.get("/queue")
async def review_queue(
    status_filter: SubmissionStatus | None = Query(default=None, alias="status"),
    actor: ActorContext = Depends(get_actor),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    """Unpublished submissions for reviewers, optionally filtered by status."""
    submissions = await submission_workflow.list_queue(db, actor, status_filter)
    return {"data": [s.to_dict() for s in submissions]}


@router.get("/published")
async def published_gallery(db: AsyncSession = Depends(get_session)) -> dict[str, Any]:
    """Public gallery; no authentication required."""
    submissions = await submission_workflow.list_published(db)
    return {"data": [s.to_dict() for s in submissions]}


@router.get("/{submission_id}")
async def get_submission(
    submission_id: uuid.UUID,
    actor: ActorContext = Depends(get_actor),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    submission = await submission_workflow.get(db, actor, submission_id)
    return {"data": submission.to_dict()}


# ── Owner operations ─────────────────────────────────────────────────


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_submission(
    payload: SubmissionCreate,
    actor: ActorContext = Depends(get_actor),
    db: AsyncSession = Depends(get_session),
    limiter: RateLimiter = Depends(get_rate_limiter),
) -> dict[str, Any]:
    submission = await submission_workflow.create(db, actor, payload, limiter)
    return {"success": True, "id": str(submission.id)}


@router.patch("/{submission_id}")
async def edit_submission(
    submission_id: uuid.UUID,
    payload: SubmissionUpdate,
    actor: ActorContext = Depends(get_actor),
    db: AsyncSession = Depends(get_session),
) -> dict[str, bool]:
    await submission_workflow.edit(db, actor, submission_id, payload)
    return _OK


# ── Editorial operations ─────────────────────────────────────────────


@router.post("/{submission_id}/assign")
async def assign_editor(
    submission_id: uuid.UUID,
    payload: AssignRequest,
    actor: ActorContext = Depends(get_actor),
    db: AsyncSession = Depends(get_session),
) -> dict[str, bool]:
    await submission_workflow.assign(db, actor, submission_id, payload)
    return _OK


@router.post("/{submission_id}/notes")
async def set_editor_notes(
    submission_id: uuid.UUID,
    payload: NotesRequest,
    actor: ActorContext = Depends(get_actor),
    db: AsyncSession = Depends(get_session),
) -> dict[str, bool]:
    await submission_workflow.set_notes(db, actor, submission_id, payload)
    return _OK


@router.post("/{submission_id}/status")
async def change_status(
    submission_id: uuid.UUID,
    payload: StatusChangeRequest,
    actor: ActorContext = Depends(get_actor),
    db: AsyncSession = Depends(get_session),
) -> dict[str, bool]:
    await submission_workflow.change_status(db, actor, submission_id, payload)
    return _OK


@router.post("/{submission_id}/publish")
async def publish_submission(
    submission_id: uuid.UUID,
    payload: PublishRequest,
    actor: ActorContext = Depends(get_actor),
    db: AsyncSession = Depends(get_session),
) -> dict[str, bool]:
    await submission_workflow.publish(db, actor, submission_id, payload)
    return _OK


@router.delete("/{submission_id}")
async def delete_submission(
    submission_id: uuid.UUID,
    actor: ActorContext = Depends(get_actor),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    deleted = await submission_workflow.delete(db, actor, submission_id)
    return {"success": True, "message": "Submission deleted successfully.", "deleted": deleted}


@router.post("/{submission_id}/convert-to-gdoc")
async def convert_to_gdoc(
    submission_id: uuid.UUID,
    actor: ActorContext = Depends(require_role("committee")),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    url = await submission_workflow.convert_to_gdoc(db, actor, submission_id)
    return {"success": True, "google_doc_url": url}
