"""Async httpx client for Google Docs conversion and export.

Conversion goes through an automation webhook that copies the uploaded file
into Drive and answers with the new document id. Rendered HTML for the
published gallery is read from the public export endpoint.
"""

from __future__ import annotations

import logging

import httpx
from pydantic import ValidationError

from chickenscratch.config import settings
from chickenscratch.integrations.gdocs.schemas import ConversionRequest, ConversionResult, extract_doc_id

logger = logging.getLogger(__name__)

_EXPORT_URL = "https://docs.google.com/document/d/{doc_id}/export"


class DocumentError(Exception):
    """Conversion webhook or export endpoint failed."""


class DocumentNotConfiguredError(DocumentError):
    """No conversion webhook configured."""


class DocumentClient:
    """Wraps the conversion webhook and the HTML export endpoint."""

    def __init__(self) -> None:
        self._webhook_url = settings.documents.conversion_webhook_url
        self._timeout = httpx.Timeout(float(settings.documents.document_timeout), connect=5.0)

    @property
    def _bypass_mode(self) -> bool:
        """Return True if the webhook is not configured."""
        return not self._webhook_url

    async def convert(self, request: ConversionRequest) -> ConversionResult:
        """Ask the webhook to create a Google Doc from an uploaded file.

        Raises:
            DocumentNotConfiguredError: webhook URL missing.
            DocumentError: webhook failed or answered without a document id.
        """
        if self._bypass_mode:
            raise DocumentNotConfiguredError("Conversion webhook is not configured")

        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.post(self._webhook_url, json=request.model_dump())
                response.raise_for_status()
                payload = response.json()
        except httpx.TimeoutException as exc:
            raise DocumentError("Conversion webhook timed out") from exc
        except httpx.HTTPStatusError as exc:
            msg = f"Conversion webhook HTTP {exc.response.status_code}"
            raise DocumentError(msg) from exc
        except (httpx.HTTPError, ValueError) as exc:
            msg = f"Conversion webhook error: {exc}"
            raise DocumentError(msg) from exc

        try:
            result = ConversionResult.model_validate(payload)
        except ValidationError as exc:
            raise DocumentError("Conversion webhook returned no google_doc_id") from exc

        logger.info("Converted submission %s to doc %s", request.submission_id, result.google_doc_id)
        return result

    async def fetch_rendered_html(self, doc_link: str | None) -> str | None:
        """Fetch the HTML export of a Google Doc. None when there is no usable link.

        Raises:
            DocumentError: the export request failed.
        """
        doc_id = extract_doc_id(doc_link)
        if doc_id is None:
            return None

        try:
            async with httpx.AsyncClient(timeout=self._timeout, follow_redirects=True) as client:
                response = await client.get(_EXPORT_URL.format(doc_id=doc_id), params={"format": "html"})
                response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            msg = f"Document export HTTP {exc.response.status_code}"
            raise DocumentError(msg) from exc
        except httpx.HTTPError as exc:
            msg = f"Document export error: {exc}"
            raise DocumentError(msg) from exc

        return response.text


# Module-level singleton
document_client = DocumentClient()
