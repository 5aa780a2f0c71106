"""Async httpx client for the Resend transactional email API."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from chickenscratch.config import settings
from chickenscratch.integrations.email.templates import render_html, render_subject
from chickenscratch.models.enums import EmailTemplate

logger = logging.getLogger(__name__)


class EmailDeliveryError(Exception):
    """Resend refused or could not be reached."""


class EmailClient:
    """Thin async wrapper around POST https://api.resend.com/emails.

    Auth: Bearer API key. Without a key the client runs in log-only mode.
    """

    def __init__(self) -> None:
        self._api_url = settings.email.resend_api_url
        self._api_key = settings.email.resend_api_key
        self._sender = settings.email.email_from
        self._site_url = settings.email.site_url.rstrip("/")
        self._timeout = httpx.Timeout(float(settings.email.email_timeout), connect=5.0)

    @property
    def _bypass_mode(self) -> bool:
        """Return True if API key is not configured (dev/test bypass)."""
        return not self._api_key

    async def send(
        self,
        template: EmailTemplate,
        to: list[str],
        subject_values: dict[str, Any] | None = None,
        **context: Any,
    ) -> str | None:
        """Render and send one email. Returns the provider message id.

        Raises:
            EmailDeliveryError: on timeout, transport error, or non-2xx response.
        """
        if not to:
            return None

        subject = render_subject(template, **(subject_values or {}))
        html = render_html(template, site_url=self._site_url, **context)

        if self._bypass_mode:
            logger.info("Email (log-only) template=%s to=%s subject=%r", template.value, to, subject)
            return None

        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.post(
                    self._api_url,
                    headers={"Authorization": f"Bearer {self._api_key}"},
                    json={"from": self._sender, "to": to, "subject": subject, "html": html},
                )
                response.raise_for_status()
                payload: dict = response.json()
        except httpx.TimeoutException as exc:
            msg = f"Resend timeout sending {template.value}"
            raise EmailDeliveryError(msg) from exc
        except httpx.HTTPStatusError as exc:
            msg = f"Resend HTTP {exc.response.status_code} sending {template.value}"
            raise EmailDeliveryError(msg) from exc
        except httpx.HTTPError as exc:
            msg = f"Resend transport error sending {template.value}: {exc}"
            raise EmailDeliveryError(msg) from exc

        message_id = payload.get("id")
        logger.info("Email sent template=%s recipients=%d id=%s", template.value, len(to), message_id)
        return message_id


# Module-level singleton
email_client = EmailClient()
