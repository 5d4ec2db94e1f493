"""Deal JSON API, including deal tag links."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from ..models.deal import Deal
from ..models.location import Location
from ..schemas.deal import DealCreate, DealResponse, DealUpdate
from ..services import deal_svc
from ..tenant.deps import get_current_location

router = APIRouter(prefix="/api/loc/{slug}/deals", tags=["deals"])


def _deal_payload(deal: Deal, tag_ids: list[uuid.UUID]) -> DealResponse:
    return DealResponse.model_validate(deal).model_copy(update={"tag_ids": tag_ids})


@router.get("", response_model=list[DealResponse])
async def list_deals(
    status: str | None = None,
    location: Location = Depends(get_current_location),
    db: AsyncSession = Depends(get_db),
):
    deals = await deal_svc.list_deals(db, location.id, status=status)
    tag_map = await deal_svc.get_tag_ids_for_deals(db, [d.id for d in deals])
    return [_deal_payload(d, tag_map.get(d.id, [])) for d in deals]


@router.post("", response_model=DealResponse, status_code=201)
async def create_deal(
    data: DealCreate,
    location: Location = Depends(get_current_location),
    db: AsyncSession = Depends(get_db),
):
    deal = await deal_svc.create_deal(db, location.id, **data.model_dump())
    return _deal_payload(deal, [])


@router.get("/{deal_id}", response_model=DealResponse)
async def get_deal(
    deal_id: uuid.UUID,
    location: Location = Depends(get_current_location),
    db: AsyncSession = Depends(get_db),
):
    deal = await deal_svc.get_deal(db, location.id, deal_id)
    return _deal_payload(deal, await deal_svc.get_deal_tag_ids(db, deal.id))


@router.put("/{deal_id}", response_model=DealResponse)
async def update_deal(
    deal_id: uuid.UUID,
    data: DealUpdate,
    location: Location = Depends(get_current_location),
    db: AsyncSession = Depends(get_db),
):
    deal = await deal_svc.update_deal(
        db, location.id, deal_id, **data.model_dump(exclude_unset=True)
    )
    return _deal_payload(deal, await deal_svc.get_deal_tag_ids(db, deal.id))


@router.delete("/{deal_id}")
async def delete_deal(
    deal_id: uuid.UUID,
    location: Location = Depends(get_current_location),
    db: AsyncSession = Depends(get_db),
):
    await deal_svc.delete_deal(db, location.id, deal_id)
    return {"success": True}


@router.post("/{deal_id}/tags/{tag_id}")
async def add_deal_tag(
    deal_id: uuid.UUID,
    tag_id: uuid.UUID,
    location: Location = Depends(get_current_location),
    db: AsyncSession = Depends(get_db),
):
    added = await deal_svc.add_tag_to_deal(db, location.id, deal_id, tag_id)
    return {"success": True, "added": added}


@router.delete("/{deal_id}/tags/{tag_id}")
async def remove_deal_tag(
    deal_id: uuid.UUID,
    tag_id: uuid.UUID,
    location: Location = Depends(get_current_location),
    db: AsyncSession = Depends(get_db),
):
    removed = await deal_svc.remove_tag_from_deal(db, location.id, deal_id, tag_id)
    return {"success": True, "removed": removed}
