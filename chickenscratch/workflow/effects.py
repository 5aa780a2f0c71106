"""Post-commit side effects.

The workflow commits its primary mutation first, then hands a list of
SideEffects to `dispatch()`. Each effect runs in order, is retried up to
`max_attempts` times, and on final failure is logged as a handled issue
(plus its optional `on_failure` hook). One failing effect never stops the
others and never reaches the caller.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

from chickenscratch.config import settings
from chickenscratch.observability import log_handled_issue

logger = logging.getLogger(__name__)

EffectRunner = Callable[[], Awaitable[None]]
FailureHook = Callable[[Exception, int], Awaitable[None]]


@dataclass
class SideEffect:
    """A named, best-effort task to run after commit."""

    name: str
    run: EffectRunner
    context: dict[str, Any] = field(default_factory=dict)
    on_failure: FailureHook | None = None


@dataclass
class DispatchReport:
    """Which effects succeeded and which gave up."""

    succeeded: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)


async def _run_with_retries(effect: SideEffect, max_attempts: int) -> tuple[Exception | None, int]:
    last_exc: Exception | None = None
    attempt = 0
    for attempt in range(1, max_attempts + 1):
        try:
            await effect.run()
            return None, attempt
        except Exception as exc:
            last_exc = exc
            logger.debug("Side effect %s attempt %d/%d failed: %s", effect.name, attempt, max_attempts, exc)
    return last_exc, attempt


async def dispatch(effects: list[SideEffect], max_attempts: int | None = None) -> DispatchReport:
    """Run post-commit effects in order, isolating every failure."""
    attempts = max(1, max_attempts if max_attempts is not None else settings.effect_max_attempts)
    report = DispatchReport()

    for effect in effects:
        exc, tries = await _run_with_retries(effect, attempts)
        if exc is None:
            report.succeeded.append(effect.name)
            continue

        report.failed.append(effect.name)
        log_handled_issue(
            f"effect:{effect.name}",
            reason=f"Side effect gave up after {tries} attempt(s)",
            cause=exc,
            context=effect.context,
        )
        if effect.on_failure is not None:
            try:
                await effect.on_failure(exc, tries)
            except Exception:
                logger.exception("Failure hook for side effect %s raised", effect.name)

    return report
