"""Liveness and readiness checks."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy import func, select, text
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from ..models.location import Location

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check(db: AsyncSession = Depends(get_db)):
    await db.execute(text("SELECT 1"))
    return {"status": "healthy", "service": "crm"}


@router.get("/ready")
async def readiness_check(db: AsyncSession = Depends(get_db)):
    # Fails until the schema exists (migrations applied)
    locations = (await db.execute(select(func.count()).select_from(Location))).scalar() or 0
    return {"status": "ready", "service": "crm", "locations": locations}
