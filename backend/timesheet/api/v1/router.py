"""API v1 router aggregation module.

Combines the per-domain routers and sets their prefixes and tags.
"""

from __future__ import annotations

from fastapi import APIRouter

from timesheet.api.v1.activities import router as activities_router
from timesheet.api.v1.ai import router as ai_router
from timesheet.api.v1.health import router as health_router
from timesheet.api.v1.me import router as me_router
from timesheet.api.v1.pm import router as pm_router
from timesheet.api.v1.projects import router as projects_router

router = APIRouter()

router.include_router(
    health_router,
    tags=["health"],
)

router.include_router(
    me_router,
    tags=["profile"],
)

router.include_router(
    projects_router,
    prefix="/projects",
    tags=["projects"],
)

router.include_router(
    ai_router,
    prefix="/ai",
    tags=["ai"],
)

router.include_router(
    activities_router,
    prefix="/activities",
    tags=["activities"],
)

router.include_router(
    pm_router,
    prefix="/pm",
    tags=["pm"],
)
