"""Keepalive endpoint."""

from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from timesheet.api.deps import get_session
from timesheet.tasks.keepalive import ping_database

router = APIRouter()


@router.get("/keepalive", summary="Database keepalive")
async def keepalive(
    session: AsyncSession = Depends(get_session),
) -> dict[str, object]:
    """Touch the database so the hosted instance stays awake. No auth."""
    await ping_database(session)
    return {"ok": True, "ts": datetime.now(timezone.utc).isoformat()}
