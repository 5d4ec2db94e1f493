"""Location (tenant) provisioning routes."""

from __future__ import annotations

import re

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from ..errors import ConflictError, ValidationError
from ..models.location import Location
from ..schemas.location import LocationCreate, LocationResponse

router = APIRouter(prefix="/api/locations", tags=["locations"])


def _slugify(name: str) -> str:
    slug = name.lower().strip()
    slug = re.sub(r"[^\w\s-]", "", slug)
    slug = re.sub(r"[\s_]+", "-", slug)
    return re.sub(r"-+", "-", slug).strip("-")


@router.get("", response_model=list[LocationResponse])
async def location_list(db: AsyncSession = Depends(get_db)):
    result = await db.execute(select(Location).order_by(Location.name))
    return list(result.scalars().all())


@router.post("", response_model=LocationResponse, status_code=201)
async def location_create(data: LocationCreate, db: AsyncSession = Depends(get_db)):
    slug = _slugify(data.slug or data.name)
    if not slug:
        raise ValidationError("Location slug is empty", details=[{"field": "slug"}])

    existing = await db.execute(select(Location).where(Location.slug == slug))
    if existing.scalar_one_or_none():
        raise ConflictError(f"Location '{slug}' already exists")

    location = Location(name=data.name.strip(), slug=slug, timezone=data.timezone)
    db.add(location)
    await db.commit()
    await db.refresh(location)
    return location
