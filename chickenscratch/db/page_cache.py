"""Page-cache invalidation for portal views.

Rendered views are cached in Redis under `page:{path}`. Invalidation deletes
those keys and publishes the paths on a channel so front-end instances can
drop their own copies.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable

from chickenscratch.db.engine import redis_client
from chickenscratch.models.enums import PageView

logger = logging.getLogger(__name__)

INVALIDATION_CHANNEL = "cache:invalidate"

# Every view that can show a submission
SUBMISSION_VIEWS: tuple[PageView, ...] = (
    PageView.MINE,
    PageView.EDITOR,
    PageView.COMMITTEE,
    PageView.PUBLISHED,
)


def page_key(path: str) -> str:
    return f"page:{path}"


class PageCache:
    """Deletes cached views and announces the invalidation."""

    def __init__(self, redis: object) -> None:
        self._redis = redis

    async def invalidate(self, views: Iterable[PageView] = SUBMISSION_VIEWS) -> None:
        """Drop the given views. Raises on Redis errors; callers run this as a side effect."""
        paths = [view.value for view in views]
        if not paths:
            return
        await self._redis.delete(*[page_key(p) for p in paths])
        await self._redis.publish(INVALIDATION_CHANNEL, json.dumps({"paths": paths}))
        logger.debug("Invalidated views: %s", ", ".join(paths))


# Module-level singleton
page_cache = PageCache(redis_client)
