"""FastAPI application entry point: wires routers, handlers and lifecycle.

Usage:
    python -m chickenscratch.main
"""

from __future__ import annotations

import logging
import sys
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
import uvicorn
from fastapi import FastAPI

from chickenscratch.api import admin, submissions
from chickenscratch.api.errors import register_error_handlers
from chickenscratch.config import settings
from chickenscratch.db.engine import db_lifespan, redis_client
from chickenscratch.security.rate_limiter import build_rate_limiter

# ── Logging setup ────────────────────────────────────────────────────

logging.basicConfig(
    level=getattr(logging, settings.log_level),
    format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
    stream=sys.stdout,
)
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.dev.ConsoleRenderer(),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
)

logger = logging.getLogger(__name__)

# ── FastAPI lifespan ─────────────────────────────────────────────────


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application startup and shutdown lifecycle."""
    logger.info("Starting Chicken Scratch workflow API (env=%s)", settings.environment)

    async with db_lifespan():
        logger.info("Database initialized")

        app.state.rate_limiter = build_rate_limiter(settings.rate_limit.rate_limit_backend, redis_client)
        logger.info("Rate limiter ready (backend=%s)", settings.rate_limit.rate_limit_backend)

        try:
            yield
        finally:
            logger.info("Shutting down Chicken Scratch workflow API...")

    logger.info("Shutdown complete")


# ── FastAPI app ──────────────────────────────────────────────────────

app = FastAPI(
    title="Chicken Scratch API",
    description="Submission review and publication workflow for the Chicken Scratch zine",
    version="0.1.0",
    lifespan=lifespan,
)
app.include_router(submissions.router)
app.include_router(admin.router)
register_error_handlers(app)


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "ok", "environment": settings.environment}


# ── Entry point ──────────────────────────────────────────────────────

if __name__ == "__main__":
    uvicorn.run(
        "chickenscratch.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.environment == "development",
        log_level=settings.log_level.lower(),
    )
