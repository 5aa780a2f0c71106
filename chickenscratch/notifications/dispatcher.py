"""Notification dispatcher: turns workflow events into email side effects.

Emails never fail the operation that triggered them. Each notification is
wrapped in a SideEffect; when it gives up after retries, a
NotificationFailure row is written in its own session so operators can see
what was not delivered.
"""

from __future__ import annotations

import logging
import uuid

from sqlalchemy import select

from chickenscratch.db.engine import async_session_factory
from chickenscratch.integrations.email.client import EmailClient, email_client
from chickenscratch.models.enums import EmailTemplate, Position, SubmissionStatus
from chickenscratch.models.notification_failure import NotificationFailure
from chickenscratch.models.profile import Profile
from chickenscratch.models.submission import Submission
from chickenscratch.models.user_role import UserRole
from chickenscratch.observability import log_handled_issue
from chickenscratch.workflow.effects import SideEffect

logger = logging.getLogger(__name__)

# Status → template sent to the owner; in_review sends nothing
STATUS_TEMPLATES: dict[SubmissionStatus, EmailTemplate] = {
    SubmissionStatus.NEEDS_REVISION: EmailTemplate.NEEDS_REVISION,
    SubmissionStatus.ACCEPTED: EmailTemplate.ACCEPTED,
    SubmissionStatus.DECLINED: EmailTemplate.DECLINED,
}

# Positions told about every new submission
NEW_SUBMISSION_POSITIONS: tuple[str, ...] = (
    Position.SUBMISSIONS_COORDINATOR.value,
    Position.EDITOR_IN_CHIEF.value,
)


def template_for_status(status: SubmissionStatus) -> EmailTemplate | None:
    return STATUS_TEMPLATES.get(status)


async def record_failure(
    submission_id: uuid.UUID | None,
    template: EmailTemplate,
    recipients: list[str],
    exc: Exception,
    attempts: int,
) -> None:
    """Persist an undelivered notification. Logs and gives up if the insert fails."""
    try:
        async with async_session_factory() as session:
            session.add(NotificationFailure(
                submission_id=submission_id,
                template=template.value,
                recipients=recipients,
                error=str(exc) or type(exc).__name__,
                attempts=attempts,
            ))
            await session.commit()
    except Exception as db_exc:
        log_handled_issue(
            "notifications:record_failure",
            reason="Could not persist notification failure",
            cause=db_exc,
            context={"submission_id": str(submission_id), "template": template.value},
        )


async def recipients_for_positions(positions: tuple[str, ...] = NEW_SUBMISSION_POSITIONS) -> list[str]:
    """Emails of every profile holding one of the given positions."""
    async with async_session_factory() as session:
        result = await session.execute(
            select(Profile.email)
            .join(UserRole, UserRole.user_id == Profile.id)
            .where(UserRole.positions.overlap(list(positions)))
            .where(Profile.email.is_not(None))
        )
        return sorted({email for email in result.scalars().all() if email})


class NotificationDispatcher:
    """Builds email side effects for the submission workflow."""

    def __init__(self, client: EmailClient | None = None) -> None:
        self._client = client or email_client

    def status_changed(
        self,
        submission: Submission,
        owner_email: str | None,
        new_status: SubmissionStatus,
    ) -> SideEffect | None:
        """Email the owner about a decision. None when the status sends nothing."""
        template = template_for_status(new_status)
        if template is None:
            return None
        if not owner_email:
            logger.info("Submission %s owner has no email, skipping %s", submission.id, template.value)
            return None

        recipients = [owner_email]
        submission_id = submission.id
        context = {
            "submission": {"id": str(submission.id), "title": submission.title},
            "editor_notes": submission.editor_notes,
        }

        async def run() -> None:
            await self._client.send(template, recipients, **context)

        async def on_failure(exc: Exception, attempts: int) -> None:
            await record_failure(submission_id, template, recipients, exc, attempts)

        return SideEffect(
            name=f"email:{template.value}",
            run=run,
            context={"submission_id": str(submission_id), "template": template.value},
            on_failure=on_failure,
        )

    def submission_received(self, submission: Submission, author_name: str | None) -> SideEffect:
        """Tell the coordinator and editor-in-chief about a new piece."""
        template = EmailTemplate.NEW_SUBMISSION
        submission_id = submission.id
        context = {
            "submission": {
                "id": str(submission.id),
                "title": submission.title,
                "type": submission.type,
                "genre": submission.genre,
            },
            "author_name": author_name,
        }
        sent_to: list[str] = []

        async def run() -> None:
            if not sent_to:
                sent_to.extend(await recipients_for_positions())
            if not sent_to:
                logger.info("No position holders to notify about submission %s", submission_id)
                return
            await self._client.send(
                template,
                sent_to,
                subject_values={"title": submission.title},
                **context,
            )

        async def on_failure(exc: Exception, attempts: int) -> None:
            await record_failure(submission_id, template, list(sent_to), exc, attempts)

        return SideEffect(
            name=f"email:{template.value}",
            run=run,
            context={"submission_id": str(submission_id), "template": template.value},
            on_failure=on_failure,
        )


# Module-level singleton
notification_dispatcher = NotificationDispatcher()
