"""Async httpx client for the Supabase Storage REST API.

Only the two calls the workflow makes are wrapped: bulk removal of uploaded
files and short-lived signed URLs for the document conversion webhook.
"""

from __future__ import annotations

import logging
from urllib.parse import quote

import httpx

from chickenscratch.config import settings

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Storage API refused or could not be reached."""


class StorageNotConfiguredError(StorageError):
    """No storage URL/key configured."""


class StorageClient:
    """Thin async wrapper around {storage_url}/storage/v1.

    Auth: service-role key as Bearer token and apikey header.
    """

    def __init__(self) -> None:
        self._base_url = settings.storage.storage_url.rstrip("/")
        self._api_key = settings.storage.storage_service_key
        self._bucket = settings.storage.submissions_bucket
        self._timeout = httpx.Timeout(float(settings.storage.storage_timeout), connect=5.0)

    @property
    def _bypass_mode(self) -> bool:
        """Return True if storage is not configured (dev/test bypass)."""
        return not (self._base_url and self._api_key)

    @property
    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self._api_key}", "apikey": self._api_key}

    async def remove(self, paths: list[str]) -> int:
        """Delete objects from the submissions bucket. Returns the count removed.

        Raises:
            StorageError: on timeout, transport error, or non-2xx response.
        """
        if not paths:
            return 0
        if self._bypass_mode:
            logger.info("Storage bypass: would remove %d file(s)", len(paths))
            return 0

        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.request(
                    "DELETE",
                    f"{self._base_url}/storage/v1/object/{self._bucket}",
                    headers=self._headers,
                    json={"prefixes": paths},
                )
                response.raise_for_status()
                removed = response.json()
        except httpx.HTTPStatusError as exc:
            msg = f"Storage HTTP {exc.response.status_code} removing {len(paths)} file(s)"
            raise StorageError(msg) from exc
        except httpx.HTTPError as exc:
            msg = f"Storage transport error removing files: {exc}"
            raise StorageError(msg) from exc

        count = len(removed) if isinstance(removed, list) else len(paths)
        logger.info("Removed %d file(s) from bucket %s", count, self._bucket)
        return count

    async def create_signed_url(self, path: str, ttl: int | None = None) -> str:
        """Return an absolute signed URL for one object.

        Raises:
            StorageNotConfiguredError: storage URL/key missing.
            StorageError: the API refused or returned no URL.
        """
        if self._bypass_mode:
            raise StorageNotConfiguredError("Storage is not configured")

        expires_in = ttl if ttl is not None else settings.storage.signed_url_ttl
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.post(
                    f"{self._base_url}/storage/v1/object/sign/{self._bucket}/{quote(path)}",
                    headers=self._headers,
                    json={"expiresIn": expires_in},
                )
                response.raise_for_status()
                payload: dict = response.json()
        except httpx.HTTPStatusError as exc:
            msg = f"Storage HTTP {exc.response.status_code} signing file"
            raise StorageError(msg) from exc
        except httpx.HTTPError as exc:
            msg = f"Storage transport error signing file: {exc}"
            raise StorageError(msg) from exc

        signed = payload.get("signedURL") or payload.get("signedUrl")
        if not signed:
            raise StorageError("Storage returned no signed URL")
        if signed.startswith("http"):
            return signed
        return f"{self._base_url}/storage/v1{signed}"


# Module-level singleton
storage_client = StorageClient()
