"""Tag usage counting.

``Tag.usage_count`` is a cache: contacts referencing the tag by name plus
deal_tag rows referencing it by id. It is recomputed after tag-side
operations only; editing a contact's tags directly leaves it stale until
the next recalculation.
"""

from __future__ import annotations

import logging
import uuid
from collections import Counter

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.contact import Contact
from ..models.tag import DealTag, Tag
from . import tag_svc

logger = logging.getLogger(__name__)


async def _contact_name_counts(db: AsyncSession, location_id: uuid.UUID) -> Counter:
    """Number of contacts holding each tag name (a contact counts once per name)."""
    result = await db.execute(select(Contact.tags).where(Contact.location_id == location_id))
    counts: Counter = Counter()
    for (names,) in result.all():
        counts.update(set(names or []))
    return counts


async def _deal_counts(db: AsyncSession, tag_ids: list[uuid.UUID]) -> dict[uuid.UUID, int]:
    if not tag_ids:
        return {}
    stmt = (
        select(DealTag.tag_id, func.count())
        .where(DealTag.tag_id.in_(tag_ids))
        .group_by(DealTag.tag_id)
    )
    result = await db.execute(stmt)
    return {tag_id: count for tag_id, count in result.all()}


async def recalculate(db: AsyncSession, location_id: uuid.UUID, tag_ids) -> list[Tag]:
    """Recompute usage_count for the given tags. Does not commit."""
    tags = await tag_svc.get_tags_by_ids(db, location_id, tag_ids)
    if not tags:
        return []

    await db.flush()
    contact_counts = await _contact_name_counts(db, location_id)
    deal_counts = await _deal_counts(db, [t.id for t in tags])

    for tag in tags:
        tag.usage_count = contact_counts.get(tag.name, 0) + deal_counts.get(tag.id, 0)
        tag.touch()

    logger.debug("Recalculated usage for %d tag(s) in location %s", len(tags), location_id)
    return tags


async def usage_stats(
    db: AsyncSession, location_id: uuid.UUID, tag_ids=None
) -> list[dict]:
    """Live per-tag usage breakdown; all tenant tags when ``tag_ids`` is empty."""
    if tag_ids:
        tags = await tag_svc.get_tags_by_ids(db, location_id, tag_ids)
    else:
        result = await db.execute(
            select(Tag).where(Tag.location_id == location_id).order_by(Tag.name)
        )
        tags = list(result.scalars().all())

    contact_counts = await _contact_name_counts(db, location_id)
    deal_counts = await _deal_counts(db, [t.id for t in tags])

    stats = []
    for tag in tags:
        contacts = contact_counts.get(tag.name, 0)
        deals = deal_counts.get(tag.id, 0)
        stats.append({
            "tag_id": tag.id,
            "tag_name": tag.name,
            "contacts": contacts,
            "companies": 0,
            "deals": deals,
            "tickets": 0,
            "conversations": 0,
            "total": contacts + deals,
        })
    return stats
