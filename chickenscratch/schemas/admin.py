"""Pydantic schemas for admin-only endpoints."""

from __future__ import annotations

import uuid

from pydantic import BaseModel, ConfigDict, model_validator


class ClearFailuresRequest(BaseModel):
    """Body of DELETE /admin/notification-failures: one id, or `all`."""

    model_config = ConfigDict(extra="forbid")

    id: uuid.UUID | None = None
    all: bool = False

    @model_validator(mode="after")
    def id_or_all(self) -> ClearFailuresRequest:
        if self.id is None and not self.all:
            msg = "Missing id or all flag"
            raise ValueError(msg)
        if self.id is not None and self.all:
            msg = "Send either id or all, not both"
            raise ValueError(msg)
        return self
