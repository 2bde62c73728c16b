"""FastAPI application entry point.

Lifecycle management, middleware, routing and exception handler
registration.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from timesheet.api.v1.router import router as api_v1_router
from timesheet.config import settings
from timesheet.core.exceptions import register_exception_handlers

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Manage the application lifecycle.

    Starts the background scheduler on startup when a job is configured
    and stops it on shutdown.

    Args:
        app: FastAPI application instance.
    """
    # --- startup ---
    logger.info("Application startup")

    from timesheet.tasks.scheduler import scheduler, setup_jobs

    started = setup_jobs()
    if started:
        scheduler.start()
        logger.info("APScheduler started")

    yield

    # --- shutdown ---
    logger.info("Application shutdown")

    if started:
        scheduler.shutdown(wait=False)
        logger.info("APScheduler stopped")


app = FastAPI(
    title="Timesheet API",
    description="Daily activity reporting with AI-assisted entry and a manager dashboard",
    version="1.0.0",
    lifespan=lifespan,
)

# ---------------------------------------------------------------------------
# Middleware
# ---------------------------------------------------------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ---------------------------------------------------------------------------
# Exception handlers
# ---------------------------------------------------------------------------
register_exception_handlers(app)

# ---------------------------------------------------------------------------
# Routing
# ---------------------------------------------------------------------------
app.include_router(api_v1_router, prefix="/api/v1")


@app.get("/health", tags=["health"])
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "ok"}
