"""Submission workflow: every state change a submission can go through.

Each mutation follows the same shape:

    capability check -> load (404) -> preconditions -> mutate -> flush
    -> audit -> commit -> post-commit side effects

The commit happens here, before side effects run, so an email or cache
failure can never roll back a change that was already reported as done.
Side effects are isolated by `dispatch()` and only ever logged.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from chickenscratch.config import settings
from chickenscratch.db.page_cache import PageCache, page_cache
from chickenscratch.integrations.gdocs.client import (
    DocumentClient,
    DocumentError,
    DocumentNotConfiguredError,
    document_client,
)
from chickenscratch.integrations.gdocs.schemas import ConversionRequest
from chickenscratch.integrations.storage.client import (
    StorageClient,
    StorageError,
    StorageNotConfiguredError,
    storage_client,
)
from chickenscratch.models.enums import (
    DECISION_STATUSES,
    EDITABLE_STATUSES,
    AuditAction,
    SubmissionStatus,
    SubmissionType,
)
from chickenscratch.models.profile import Profile
from chickenscratch.models.submission import Submission
from chickenscratch.notifications.dispatcher import NotificationDispatcher, notification_dispatcher
from chickenscratch.observability import log_handled_issue
from chickenscratch.schemas.submissions import (
    AssignRequest,
    NotesRequest,
    PublishRequest,
    StatusChangeRequest,
    SubmissionCreate,
    SubmissionUpdate,
)
from chickenscratch.security.audit import AuditLogger, audit_logger
from chickenscratch.security.guards import granted_only_by_legacy
from chickenscratch.security.rate_limiter import RateLimiter, submission_rate_key
from chickenscratch.workflow.context import ActorContext
from chickenscratch.workflow.effects import DispatchReport, SideEffect, dispatch
from chickenscratch.workflow.errors import (
    DependencyFailedError,
    DependencyUnavailableError,
    ForbiddenError,
    InvalidFilePathError,
    NotEditableError,
    NotesRequiredError,
    NotFoundError,
    RateLimitedError,
    ValidationFailedError,
)

logger = logging.getLogger(__name__)

# Request field -> model column for owner edits
_EDITABLE_FIELDS: tuple[str, ...] = (
    "title",
    "type",
    "genre",
    "summary",
    "content_warnings",
    "word_count",
    "text_body",
    "file_url",
    "file_name",
    "art_files",
    "cover_image",
)

_PATH_FIELDS = frozenset({"file_url", "cover_image", "art_files"})


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _check_paths(owner_id: uuid.UUID, paths: list[str]) -> None:
    """Every uploaded file must live under the owner's prefix."""
    prefix = f"{owner_id}/"
    for path in paths:
        if not path.startswith(prefix) or ".." in path.split("/"):
            raise InvalidFilePathError()


def _check_type_content(submission: Submission) -> None:
    if submission.type == SubmissionType.WRITING.value and not submission.text_body:
        raise ValidationFailedError("Writing submissions require a text body.")
    if submission.type == SubmissionType.VISUAL.value and not submission.art_files:
        raise ValidationFailedError("Visual submissions require at least one art file.")


class SubmissionWorkflow:
    """Role-gated submission transitions. AsyncSession passed per call."""

    def __init__(
        self,
        cache: PageCache | None = None,
        notifier: NotificationDispatcher | None = None,
        storage: StorageClient | None = None,
        documents: DocumentClient | None = None,
        audit: AuditLogger | None = None,
    ) -> None:
        self._cache = cache or page_cache
        self._notifier = notifier or notification_dispatcher
        self._storage = storage or storage_client
        self._documents = documents or document_client
        self._audit = audit or audit_logger

    # ── Helpers ──────────────────────────────────────────────────────

    async def _load(self, db: AsyncSession, submission_id: uuid.UUID) -> Submission:
        submission = await db.get(Submission, submission_id)
        if submission is None:
            raise NotFoundError()
        return submission

    async def _release_connection(self, db: AsyncSession) -> None:
        """End the read transaction so no pooled connection is held across an outbound call.

        Loaded rows stay usable (`expire_on_commit=False`); the next flush
        opens a fresh transaction.
        """
        await db.commit()

    async def _finish(self, db: AsyncSession, effects: list[SideEffect | None]) -> DispatchReport:
        """Commit the primary mutation, then run side effects best-effort."""
        await db.commit()
        queued = [SideEffect(name="cache:invalidate", run=self._cache.invalidate)]
        queued.extend(e for e in effects if e is not None)
        return await dispatch(queued)

    # ── Owner operations ─────────────────────────────────────────────

    async def create(
        self,
        db: AsyncSession,
        actor: ActorContext,
        payload: SubmissionCreate,
        limiter: RateLimiter,
    ) -> Submission:
        """Create a submission owned by the caller.

        Raises:
            InvalidFilePathError: a file path is outside the caller's prefix.
            RateLimitedError: the caller hit the per-window submission limit.
        """
        _check_paths(actor.id, payload.file_paths())
        if payload.id is not None and await db.get(Submission, payload.id) is not None:
            raise ValidationFailedError("A submission with this id already exists.")

        # Last gate before the insert: rejected creates never take a slot
        limit = settings.rate_limit.submission_limit
        result = await limiter.check(
            submission_rate_key(actor.id), limit=limit, window=settings.rate_limit.submission_window
        )
        if not result.allowed:
            logger.info("Submission rate limit hit: actor=%s retry_after=%ds", actor.id, result.retry_after)
            raise RateLimitedError(limit, result.retry_after)

        submission = Submission(
            id=payload.id or uuid.uuid4(),
            owner_id=actor.id,
            title=payload.title,
            type=payload.type.value,
            genre=payload.genre,
            summary=payload.summary,
            content_warnings=payload.content_warnings,
            word_count=payload.word_count,
            text_body=payload.text_body,
            file_url=payload.file_url,
            file_name=payload.file_name,
            art_files=list(payload.art_files),
            cover_image=payload.cover_image,
            status=SubmissionStatus.SUBMITTED.value,
            published=False,
        )
        db.add(submission)
        await db.flush()

        await self._audit.record(
            db, submission.id, actor.id, AuditAction.CREATE,
            {"title": submission.title, "type": submission.type},
        )
        await self._finish(db, [
            self._notifier.submission_received(submission, actor.profile.display_name),
        ])

        logger.info("Submission created: id=%s owner=%s type=%s", submission.id, actor.id, submission.type)
        return submission

    async def edit(
        self,
        db: AsyncSession,
        actor: ActorContext,
        submission_id: uuid.UUID,
        payload: SubmissionUpdate,
    ) -> Submission:
        """Apply an owner's partial update while the piece is still editable."""
        submission = await self._load(db, submission_id)
        if submission.owner_id != actor.id:
            raise ForbiddenError()
        if SubmissionStatus(submission.status) not in EDITABLE_STATUSES:
            raise NotEditableError()

        fields = [f for f in _EDITABLE_FIELDS if f in payload.model_fields_set]
        if fields and _PATH_FIELDS & set(fields):
            _check_paths(actor.id, payload.file_paths())

        for name in fields:
            value = getattr(payload, name)
            if name == "type":
                value = value.value
            elif name == "art_files":
                value = list(value)
            setattr(submission, name, value)

        _check_type_content(submission)
        await db.flush()

        await self._audit.record(db, submission.id, actor.id, AuditAction.EDIT, {"fields": fields})
        await self._finish(db, [])

        logger.info("Submission edited: id=%s fields=%s", submission.id, fields)
        return submission

    # ── Editorial operations ─────────────────────────────────────────

    async def assign(
        self,
        db: AsyncSession,
        actor: ActorContext,
        submission_id: uuid.UUID,
        payload: AssignRequest,
    ) -> Submission:
        """Set or clear the assigned editor. Repeating the same value still audits."""
        if not actor.capabilities.can_assign:
            raise ForbiddenError()
        submission = await self._load(db, submission_id)

        if payload.editor_id is not None and await db.get(Profile, payload.editor_id) is None:
            raise ValidationFailedError("Unknown editor.")

        submission.assigned_editor = payload.editor_id
        await db.flush()

        editor = str(payload.editor_id) if payload.editor_id else None
        await self._audit.record(db, submission.id, actor.id, AuditAction.ASSIGN, {"assigned_editor": editor})
        await self._finish(db, [])

        logger.info("Submission assigned: id=%s editor=%s by=%s", submission.id, editor, actor.id)
        return submission

    async def set_notes(
        self,
        db: AsyncSession,
        actor: ActorContext,
        submission_id: uuid.UUID,
        payload: NotesRequest,
    ) -> Submission:
        if not actor.capabilities.can_note:
            raise ForbiddenError()
        submission = await self._load(db, submission_id)

        submission.editor_notes = payload.editor_notes or None
        await db.flush()

        await self._audit.record(
            db, submission.id, actor.id, AuditAction.NOTE, {"editor_notes": submission.editor_notes}
        )
        await self._finish(db, [])
        return submission

    async def change_status(
        self,
        db: AsyncSession,
        actor: ActorContext,
        submission_id: uuid.UUID,
        payload: StatusChangeRequest,
    ) -> Submission:
        """Move a submission to a review status and email the owner.

        Decision statuses stamp `decision_date`; `in_review` leaves it alone.
        Notes are written whenever the request carries the key; an empty
        value clears them.
        """
        caps = actor.capabilities
        if not caps.can_change_status:
            raise ForbiddenError()
        if granted_only_by_legacy(caps):
            logger.warning(
                "Status change allowed by legacy profile role only: actor=%s role=%s",
                actor.id, actor.profile.role,
            )

        target = payload.status
        if target is SubmissionStatus.NEEDS_REVISION and not payload.editor_notes:
            raise NotesRequiredError()

        submission = await self._load(db, submission_id)
        previous = submission.status

        submission.status = target.value
        submission.published = False
        if target in DECISION_STATUSES:
            submission.decision_date = _now()
        if "editor_notes" in payload.model_fields_set:
            submission.editor_notes = payload.editor_notes or None
        await db.flush()

        await self._audit.record(
            db, submission.id, actor.id, AuditAction.STATUS_CHANGE, {"from": previous, "to": target.value}
        )

        owner = await db.get(Profile, submission.owner_id)
        await self._finish(db, [
            self._notifier.status_changed(submission, owner.email if owner else None, target),
        ])

        logger.info("Status changed: id=%s %s -> %s by=%s", submission.id, previous, target.value, actor.id)
        return submission

    async def publish(
        self,
        db: AsyncSession,
        actor: ActorContext,
        submission_id: uuid.UUID,
        payload: PublishRequest,
    ) -> Submission:
        """Publish into a volume/issue. Rendered HTML is fetched best-effort."""
        if not actor.capabilities.can_publish:
            raise ForbiddenError()
        submission = await self._load(db, submission_id)

        html = None
        if submission.google_docs_link:
            await self._release_connection(db)
            html = await self._fetch_published_html(submission)

        submission.published = True
        submission.status = SubmissionStatus.PUBLISHED.value
        submission.volume = payload.volume
        submission.issue_number = payload.issue_number
        submission.publish_date = payload.publish_date
        submission.issue = payload.issue_label
        if html is not None:
            submission.published_html = html
        await db.flush()

        await self._audit.record(db, submission.id, actor.id, AuditAction.PUBLISH, {
            "volume": payload.volume,
            "issue_number": payload.issue_number,
            "publish_date": payload.publish_date.isoformat(),
            "issue": submission.issue,
        })
        await self._finish(db, [])

        logger.info("Submission published: id=%s issue=%r", submission.id, submission.issue)
        return submission

    async def _fetch_published_html(self, submission: Submission) -> str | None:
        try:
            return await self._documents.fetch_rendered_html(submission.google_docs_link)
        except DocumentError as exc:
            log_handled_issue(
                "publish:fetch_html",
                reason="Could not fetch rendered document",
                cause=exc,
                context={"submission_id": str(submission.id)},
            )
            return None

    async def delete(
        self,
        db: AsyncSession,
        actor: ActorContext,
        submission_id: uuid.UUID,
    ) -> dict[str, Any]:
        """Delete a submission (admin tier). Stored files are removed after commit."""
        if not actor.capabilities.can_delete_anything:
            raise ForbiddenError()
        submission = await self._load(db, submission_id)

        files = submission.file_references()
        summary = {
            "submission_id": str(submission.id),
            "title": submission.title,
            "files_deleted": len(files),
        }

        await self._audit.record(db, submission.id, actor.id, AuditAction.SUBMISSION_DELETED, {
            "submission_title": submission.title,
            "submission_owner_id": str(submission.owner_id),
            "deleted_files": files,
            "google_docs_link": submission.google_docs_link,
        })
        await db.delete(submission)
        await db.flush()

        effects: list[SideEffect | None] = []
        if files:
            async def remove_files() -> None:
                await self._storage.remove(files)

            effects.append(SideEffect(
                name="storage:remove",
                run=remove_files,
                context={"submission_id": summary["submission_id"], "files": len(files)},
            ))
        await self._finish(db, effects)

        logger.info("Submission deleted: id=%s files=%d by=%s", submission_id, len(files), actor.id)
        return summary

    async def convert_to_gdoc(
        self,
        db: AsyncSession,
        actor: ActorContext,
        submission_id: uuid.UUID,
    ) -> str:
        """Convert the uploaded manuscript to a Google Doc and store its link.

        Raises:
            ValidationFailedError: no file attached.
            DependencyUnavailableError: storage or webhook not configured.
            DependencyFailedError: storage or webhook call failed.
        """
        if not actor.capabilities.can_convert_documents:
            raise ForbiddenError()
        submission = await self._load(db, submission_id)
        if not submission.file_url:
            raise ValidationFailedError("No file attached to submission.")

        owner = await db.get(Profile, submission.owner_id)
        await self._release_connection(db)
        try:
            signed_url = await self._storage.create_signed_url(submission.file_url)
            result = await self._documents.convert(ConversionRequest(
                submission_id=str(submission.id),
                file_url=signed_url,
                file_name=submission.file_name or "untitled",
                title=submission.title,
                author=owner.display_name if owner else "Unknown Author",
            ))
        except (StorageNotConfiguredError, DocumentNotConfiguredError) as exc:
            raise DependencyUnavailableError(str(exc)) from exc
        except (StorageError, DocumentError) as exc:
            raise DependencyFailedError(str(exc)) from exc

        submission.google_docs_link = result.url
        await db.flush()

        await self._audit.record(db, submission.id, actor.id, AuditAction.CONVERT_TO_GDOC, {
            "google_doc_id": result.google_doc_id,
            "google_doc_url": result.url,
        })
        await self._finish(db, [])
        return result.url

    # ── Reads ────────────────────────────────────────────────────────

    async def list_mine(self, db: AsyncSession, actor: ActorContext) -> list[Submission]:
        result = await db.execute(
            select(Submission)
            .where(Submission.owner_id == actor.id)
            .order_by(Submission.created_at.desc())
        )
        return list(result.scalars().all())

    async def list_queue(
        self,
        db: AsyncSession,
        actor: ActorContext,
        status: SubmissionStatus | None = None,
    ) -> list[Submission]:
        """Unpublished submissions for reviewers, oldest first."""
        if not actor.capabilities.can_view_queue:
            raise ForbiddenError()
        query = select(Submission).where(Submission.published.is_(False))
        if status is not None:
            query = query.where(Submission.status == status.value)
        result = await db.execute(query.order_by(Submission.created_at.asc()))
        return list(result.scalars().all())

    async def list_published(self, db: AsyncSession) -> list[Submission]:
        result = await db.execute(
            select(Submission)
            .where(Submission.published.is_(True))
            .order_by(Submission.publish_date.desc().nulls_last(), Submission.created_at.desc())
        )
        return list(result.scalars().all())

    async def get(self, db: AsyncSession, actor: ActorContext, submission_id: uuid.UUID) -> Submission:
        """One submission, visible to its owner, reviewers, or anyone once published."""
        submission = await self._load(db, submission_id)
        if submission.owner_id != actor.id and not submission.published and not actor.capabilities.can_view_queue:
            raise ForbiddenError()
        return submission


# Module-level singleton
submission_workflow = SubmissionWorkflow()
