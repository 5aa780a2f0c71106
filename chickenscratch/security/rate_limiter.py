"""Sliding-window rate limiters.

Two interchangeable backends with the same `check()` signature:

- RedisRateLimiter: sorted-set log per key, shared across processes.
- InMemoryRateLimiter: per-process fallback for development and tests.

The limiter is built once in the application lifespan and handed to
handlers through `app.state`. `check()` returns a RateLimitResult instead
of raising, so callers branch on the outcome explicitly.

Usage:
    result = await limiter.check(f"rate:{actor_id}:submission", limit=5, window=3600)
    if not result.allowed:
        ...  # 429 with Retry-After: result.retry_after
"""

from __future__ import annotations

import asyncio
import logging
import math
import time
import uuid
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RateLimitResult:
    """Outcome of a rate-limit check."""

    allowed: bool
    limit: int
    remaining: int
    retry_after: int = 0  # seconds until a slot frees up, 0 if allowed

    @classmethod
    def ok(cls, limit: int, used: int) -> RateLimitResult:
        return cls(allowed=True, limit=limit, remaining=max(limit - used, 0))

    @classmethod
    def limited(cls, limit: int, retry_after: float) -> RateLimitResult:
        return cls(allowed=False, limit=limit, remaining=0, retry_after=max(math.ceil(retry_after), 1))


class RateLimiter(Protocol):
    async def check(self, key: str, limit: int, window: int) -> RateLimitResult: ...


class RedisRateLimiter:
    """Sliding-log limiter backed by a Redis sorted set per key.

    Each accepted hit is a member scored by its timestamp. Rejected hits are
    removed again, so they never count against the caller.
    """

    def __init__(self, redis: object, clock: Callable[[], float] = time.time) -> None:
        self._redis = redis
        self._clock = clock

    async def check(self, key: str, limit: int, window: int) -> RateLimitResult:
        now = self._clock()
        member = f"{now}:{uuid.uuid4().hex}"
        try:
            async with self._redis.pipeline(transaction=True) as pipe:
                pipe.zremrangebyscore(key, 0, now - window)
                pipe.zadd(key, {member: now})
                pipe.zcard(key)
                pipe.expire(key, window)
                _, _, count, _ = await pipe.execute()

            if count > limit:
                await self._redis.zrem(key, member)
                oldest = await self._redis.zrange(key, 0, 0, withscores=True)
                oldest_ts = oldest[0][1] if oldest else now
                return RateLimitResult.limited(limit, oldest_ts + window - now)

            return RateLimitResult.ok(limit, count)
        except Exception:
            logger.exception("Rate limiter Redis error for key %s", key)
            # Fail open: don't block submissions if Redis is down
            return RateLimitResult.ok(limit, 0)


class InMemoryRateLimiter:
    """Process-local sliding-log limiter.

    Not shared between workers. Expired keys are swept opportunistically,
    at most once per `sweep_interval` seconds, during ordinary checks.
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.monotonic,
        sweep_interval: float = 300.0,
    ) -> None:
        self._clock = clock
        self._sweep_interval = sweep_interval
        self._hits: dict[str, deque[float]] = {}
        self._windows: dict[str, int] = {}
        self._lock = asyncio.Lock()
        self._last_sweep = clock()

    async def check(self, key: str, limit: int, window: int) -> RateLimitResult:
        async with self._lock:
            now = self._clock()
            self._maybe_sweep(now)

            hits = self._hits.setdefault(key, deque())
            self._windows[key] = window
            while hits and hits[0] <= now - window:
                hits.popleft()

            if len(hits) >= limit:
                return RateLimitResult.limited(limit, hits[0] + window - now)

            hits.append(now)
            return RateLimitResult.ok(limit, len(hits))

    def _maybe_sweep(self, now: float) -> None:
        if now - self._last_sweep < self._sweep_interval:
            return
        self._last_sweep = now
        expired = [
            key for key, hits in self._hits.items()
            if not hits or hits[-1] <= now - self._windows.get(key, 0)
        ]
        for key in expired:
            self._hits.pop(key, None)
            self._windows.pop(key, None)
        if expired:
            logger.debug("Rate limiter swept %d expired keys", len(expired))

    def __len__(self) -> int:
        return len(self._hits)


def build_rate_limiter(backend: str, redis: object) -> RateLimiter:
    """Construct the configured limiter. Called once at startup."""
    if backend == "memory":
        logger.warning("Using in-memory rate limiter: limits are not shared between processes")
        return InMemoryRateLimiter()
    return RedisRateLimiter(redis)


def submission_rate_key(actor_id: object) -> str:
    return f"rate:{actor_id}:submission"
