"""Tag reconciliation - rename, merge, bulk apply and delete.

Contacts reference tags by *name* (a JSON list on the contact) while deals
reference them by *id* (deal_tag rows). Every operation here keeps both
sides consistent with the canonical tag row and refreshes usage counts.

Each operation validates all inputs first, then performs its writes and
commits once; any failure rolls the whole operation back.
"""

from __future__ import annotations

import logging
import uuid

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ..errors import NotFoundError, UnsupportedOperationError, ValidationError
from ..models.tag import DealTag, Tag
from . import contact_svc, tag_svc, tag_usage_svc

logger = logging.getLogger(__name__)

BULK_OPERATIONS = ("add", "remove", "replace")
BULK_ENTITY_TYPES = ("contact",)


def apply_operation(current: list[str], names: list[str], operation: str) -> list[str]:
    """Compute a contact's next tag list for a bulk operation."""
    if operation == "add":
        return list(dict.fromkeys([*current, *names]))
    if operation == "remove":
        removed = set(names)
        return [n for n in current if n not in removed]
    if operation == "replace":
        return list(dict.fromkeys(names))
    raise ValidationError(f"Unknown bulk operation '{operation}'")


async def _propagate_rename(
    db: AsyncSession, location_id: uuid.UUID, tag: Tag, new_name: str
) -> int:
    """Rename the tag row and rewrite the old name in every contact list."""
    old_name = tag.name
    contacts = await contact_svc.contacts_with_any_tag(db, location_id, [old_name])
    tag_svc.rename_tag_row(tag, new_name)

    for contact in contacts:
        contact.tags = [new_name if n == old_name else n for n in contact.tags or []]
        contact.touch()
    return len(contacts)


async def update_tag(
    db: AsyncSession,
    location_id: uuid.UUID,
    tag_id: uuid.UUID,
    *,
    name: str | None = None,
    color: str | None = None,
    description: str | None = None,
    is_active: bool | None = None,
    category_id: uuid.UUID | None = None,
    category: str | None = None,
    fields_set: set[str] | frozenset[str] = frozenset(),
) -> Tag:
    """Update a tag, propagating a name change to contacts."""
    tag = await tag_svc.get_tag(db, location_id, tag_id)

    new_name = None
    if name is not None:
        cleaned = tag_svc.clean_tag_name(name)
        if cleaned != tag.name:
            await tag_svc.ensure_name_available(db, location_id, cleaned, exclude_id=tag.id)
            new_name = cleaned
    if category_id is not None:
        await tag_svc.get_category(db, location_id, category_id)

    try:
        if new_name:
            old_name = tag.name
            touched = await _propagate_rename(db, location_id, tag, new_name)
            logger.info(
                "Renamed tag %s %r -> %r in location %s (%d contact(s))",
                tag.id, old_name, new_name, location_id, touched,
            )
        await tag_svc.apply_tag_fields(
            db,
            tag,
            color=color,
            description=description,
            is_active=is_active,
            category_id=category_id,
            category=category,
            fields_set=fields_set,
        )
        await tag_usage_svc.recalculate(db, location_id, [tag.id])
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    await db.refresh(tag)
    return tag


async def rename_tag(
    db: AsyncSession, location_id: uuid.UUID, tag_id: uuid.UUID, new_name: str
) -> Tag:
    return await update_tag(db, location_id, tag_id, name=new_name, fields_set={"name"})


async def merge_tags(
    db: AsyncSession,
    location_id: uuid.UUID,
    source_tag_ids,
    target_tag_id: uuid.UUID,
) -> Tag:
    """Collapse the source tags into the target and delete the sources."""
    found = await tag_svc.get_tags_by_ids(db, location_id, [target_tag_id])
    if not found:
        raise NotFoundError("Tag destino não encontrada")
    target = found[0]

    sources = [
        t for t in await tag_svc.get_tags_by_ids(db, location_id, source_tag_ids)
        if t.id != target.id
    ]
    if not sources:
        raise NotFoundError("Nenhuma tag de origem encontrada")

    source_ids = [t.id for t in sources]
    source_names = {t.name for t in sources}

    try:
        contacts = await contact_svc.contacts_with_any_tag(db, location_id, source_names)
        for contact in contacts:
            kept = [n for n in contact.tags or [] if n not in source_names]
            contact.tags = list(dict.fromkeys([*kept, target.name]))
            contact.touch()

        links = (
            await db.execute(
                select(DealTag.deal_id, DealTag.tag_id).where(DealTag.tag_id.in_(source_ids))
            )
        ).all()
        holding_target = set(
            (
                await db.execute(select(DealTag.deal_id).where(DealTag.tag_id == target.id))
            ).scalars().all()
        )
        for deal_id, tag_id in links:
            match = (DealTag.deal_id == deal_id, DealTag.tag_id == tag_id)
            if deal_id in holding_target:
                stmt = delete(DealTag).where(*match)
            else:
                stmt = update(DealTag).where(*match).values(tag_id=target.id)
                holding_target.add(deal_id)
            await db.execute(stmt.execution_options(synchronize_session=False))

        await db.execute(
            delete(Tag).where(Tag.location_id == location_id, Tag.id.in_(source_ids))
        )
        await tag_usage_svc.recalculate(db, location_id, [target.id])
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    logger.info(
        "Merged %d tag(s) into %s in location %s (%d contact(s), %d deal link(s))",
        len(sources), target.id, location_id, len(contacts), len(links),
    )
    await db.refresh(target)
    return target


async def bulk_apply(
    db: AsyncSession,
    location_id: uuid.UUID,
    entity_type: str,
    entity_ids,
    tag_ids,
    operation: str,
) -> int:
    """Add, remove or replace tags across a batch of entities.

    Only contacts are supported. Returns the number of entities updated.
    """
    if operation not in BULK_OPERATIONS:
        raise ValidationError(f"Unknown bulk operation '{operation}'")
    if entity_type not in BULK_ENTITY_TYPES:
        raise UnsupportedOperationError("Operação suportada apenas para contatos no momento")

    tags = await tag_svc.get_tags_by_ids(db, location_id, tag_ids)
    if not tags:
        raise NotFoundError("Tags não encontradas")
    by_id = {t.id: t for t in tags}
    names = [by_id[i].name for i in dict.fromkeys(tag_ids) if i in by_id]

    try:
        contacts = await contact_svc.get_contacts_by_ids(db, location_id, entity_ids)
        updated = 0
        for contact in contacts:
            current = list(contact.tags or [])
            next_tags = apply_operation(current, names, operation)
            if next_tags != current:
                contact.tags = next_tags
                contact.touch()
                updated += 1

        await tag_usage_svc.recalculate(db, location_id, list(by_id))
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    logger.info(
        "Bulk %s of %d tag(s) on %d/%d contact(s) in location %s",
        operation, len(names), updated, len(contacts), location_id,
    )
    return updated


async def delete_tag(db: AsyncSession, location_id: uuid.UUID, tag_id: uuid.UUID) -> None:
    """Scrub the tag from contacts and deals, then delete the tag row."""
    tag = await tag_svc.get_tag(db, location_id, tag_id)

    try:
        contacts = await contact_svc.contacts_with_any_tag(db, location_id, [tag.name])
        for contact in contacts:
            contact.tags = [n for n in contact.tags or [] if n != tag.name]
            contact.touch()

        await db.execute(
            delete(DealTag)
            .where(DealTag.tag_id == tag.id)
            .execution_options(synchronize_session=False)
        )
        await db.delete(tag)
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    logger.info(
        "Deleted tag %s in location %s (%d contact(s) scrubbed)",
        tag_id, location_id, len(contacts),
    )
