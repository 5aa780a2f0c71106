"""Pydantic models for the Google Docs conversion webhook."""

from __future__ import annotations

import re

from pydantic import BaseModel, Field

GOOGLE_DOC_URL = "https://docs.google.com/document/d/{doc_id}/edit"

_DOC_ID = re.compile(r"/document/d/([a-zA-Z0-9_-]+)")


class ConversionRequest(BaseModel):
    """Body posted to the conversion webhook."""

    submission_id: str
    file_url: str
    file_name: str
    title: str
    author: str


class ConversionResult(BaseModel):
    """Webhook response; only the document id is used."""

    google_doc_id: str = Field(min_length=1)

    @property
    def url(self) -> str:
        return GOOGLE_DOC_URL.format(doc_id=self.google_doc_id)


def extract_doc_id(link: str | None) -> str | None:
    """Pull the document id out of a Google Docs link, or None."""
    if not link:
        return None
    match = _DOC_ID.search(link)
    return match.group(1) if match else None
