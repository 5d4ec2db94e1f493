"""Contact JSON API."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from ..models.location import Location
from ..schemas.contact import ContactCreate, ContactListResponse, ContactResponse, ContactUpdate
from ..services import contact_svc
from ..tenant.deps import get_current_location

router = APIRouter(prefix="/api/loc/{slug}/contacts", tags=["contacts"])


@router.get("", response_model=ContactListResponse)
async def list_contacts(
    search: str | None = None,
    tag: str | None = None,
    offset: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
    location: Location = Depends(get_current_location),
    db: AsyncSession = Depends(get_db),
):
    contacts, total = await contact_svc.list_contacts(
        db, location.id, search=search, tag_name=tag, offset=offset, limit=limit
    )
    return ContactListResponse(
        data=[ContactResponse.model_validate(c) for c in contacts], total=total
    )


@router.post("", response_model=ContactResponse, status_code=201)
async def create_contact(
    data: ContactCreate,
    location: Location = Depends(get_current_location),
    db: AsyncSession = Depends(get_db),
):
    return await contact_svc.create_contact(db, location.id, **data.model_dump())


@router.get("/{contact_id}", response_model=ContactResponse)
async def get_contact(
    contact_id: uuid.UUID,
    location: Location = Depends(get_current_location),
    db: AsyncSession = Depends(get_db),
):
    return await contact_svc.get_contact(db, location.id, contact_id)


@router.put("/{contact_id}", response_model=ContactResponse)
async def update_contact(
    contact_id: uuid.UUID,
    data: ContactUpdate,
    location: Location = Depends(get_current_location),
    db: AsyncSession = Depends(get_db),
):
    return await contact_svc.update_contact(
        db, location.id, contact_id, **data.model_dump(exclude_unset=True)
    )


@router.delete("/{contact_id}")
async def delete_contact(
    contact_id: uuid.UUID,
    location: Location = Depends(get_current_location),
    db: AsyncSession = Depends(get_db),
):
    await contact_svc.delete_contact(db, location.id, contact_id)
    return {"success": True}
