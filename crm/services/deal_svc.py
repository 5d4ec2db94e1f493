"""Deal service - CRUD plus deal <-> tag links."""

from __future__ import annotations

import uuid

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..errors import NotFoundError
from ..models.base import utcnow
from ..models.deal import Deal
from ..models.tag import DealTag
from . import tag_svc

CLOSED_STATUSES = {"won", "lost", "abandoned"}


async def list_deals(
    db: AsyncSession, location_id: uuid.UUID, *, status: str | None = None
) -> list[Deal]:
    stmt = select(Deal).where(Deal.location_id == location_id)
    if status:
        stmt = stmt.where(Deal.status == status)
    result = await db.execute(stmt.order_by(Deal.created_at.desc(), Deal.id))
    return list(result.scalars().all())


async def get_deal(db: AsyncSession, location_id: uuid.UUID, deal_id: uuid.UUID) -> Deal:
    stmt = select(Deal).where(Deal.id == deal_id, Deal.location_id == location_id)
    deal = (await db.execute(stmt)).scalar_one_or_none()
    if not deal:
        raise NotFoundError("Deal não encontrado")
    return deal


async def get_deal_tag_ids(db: AsyncSession, deal_id: uuid.UUID) -> list[uuid.UUID]:
    result = await db.execute(select(DealTag.tag_id).where(DealTag.deal_id == deal_id))
    return list(result.scalars().all())


async def get_tag_ids_for_deals(
    db: AsyncSession, deal_ids: list[uuid.UUID]
) -> dict[uuid.UUID, list[uuid.UUID]]:
    if not deal_ids:
        return {}
    result = await db.execute(
        select(DealTag.deal_id, DealTag.tag_id).where(DealTag.deal_id.in_(deal_ids))
    )
    mapping: dict[uuid.UUID, list[uuid.UUID]] = {deal_id: [] for deal_id in deal_ids}
    for deal_id, tag_id in result.all():
        mapping[deal_id].append(tag_id)
    return mapping


def _sync_closed_at(deal: Deal) -> None:
    if deal.status in CLOSED_STATUSES:
        if deal.closed_at is None:
            deal.closed_at = utcnow()
    else:
        deal.closed_at = None


async def create_deal(db: AsyncSession, location_id: uuid.UUID, **kwargs) -> Deal:
    deal = Deal(location_id=location_id, **kwargs)
    _sync_closed_at(deal)
    db.add(deal)
    await db.commit()
    await db.refresh(deal)
    return deal


async def update_deal(
    db: AsyncSession, location_id: uuid.UUID, deal_id: uuid.UUID, **kwargs
) -> Deal:
    deal = await get_deal(db, location_id, deal_id)
    for key, value in kwargs.items():
        setattr(deal, key, value)
    _sync_closed_at(deal)
    deal.touch()
    await db.commit()
    await db.refresh(deal)
    return deal


async def delete_deal(db: AsyncSession, location_id: uuid.UUID, deal_id: uuid.UUID) -> None:
    """Delete a deal and its tag links. Tag usage counts are not recalculated."""
    deal = await get_deal(db, location_id, deal_id)
    await db.execute(delete(DealTag).where(DealTag.deal_id == deal.id))
    await db.delete(deal)
    await db.commit()


async def add_tag_to_deal(
    db: AsyncSession, location_id: uuid.UUID, deal_id: uuid.UUID, tag_id: uuid.UUID
) -> bool:
    """Link an existing tag to a deal. Returns False if already linked."""
    deal = await get_deal(db, location_id, deal_id)
    tag = await tag_svc.get_tag(db, location_id, tag_id)

    stmt = select(DealTag).where(DealTag.deal_id == deal.id, DealTag.tag_id == tag.id)
    existing = (await db.execute(stmt)).scalar_one_or_none()
    if existing:
        return False
    db.add(DealTag(location_id=location_id, deal_id=deal.id, tag_id=tag.id))
    await db.commit()
    return True


async def remove_tag_from_deal(
    db: AsyncSession, location_id: uuid.UUID, deal_id: uuid.UUID, tag_id: uuid.UUID
) -> bool:
    deal = await get_deal(db, location_id, deal_id)
    stmt = select(DealTag).where(DealTag.deal_id == deal.id, DealTag.tag_id == tag_id)
    link = (await db.execute(stmt)).scalar_one_or_none()
    if not link:
        return False
    await db.delete(link)
    await db.commit()
    return True
