"""Contact service - CRUD, search, tag-name lists."""

from __future__ import annotations

import uuid

from sqlalchemy import func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ..errors import NotFoundError
from ..models.contact import Contact
from ..models.deal import Deal


def normalize_tag_names(names) -> list[str]:
    """Trim, drop blanks and de-duplicate while keeping first-seen order."""
    cleaned = [str(n).strip() for n in (names or [])]
    return list(dict.fromkeys(n for n in cleaned if n))


async def list_contacts(
    db: AsyncSession,
    location_id: uuid.UUID,
    *,
    search: str | None = None,
    tag_name: str | None = None,
    offset: int = 0,
    limit: int = 50,
) -> tuple[list[Contact], int]:
    """List contacts with optional search and pagination. Returns (contacts, total)."""
    stmt = select(Contact).where(Contact.location_id == location_id)

    if search:
        columns = (
            Contact.first_name,
            Contact.last_name,
            Contact.email,
            Contact.phone,
            Contact.company_name,
        )
        stmt = stmt.where(or_(*(c.icontains(search, autoescape=True) for c in columns)))

    stmt = stmt.order_by(Contact.created_at.desc(), Contact.id)

    if tag_name:
        # Tag names live in a JSON list; filter in Python to stay dialect-neutral
        matched = [
            c for c in (await db.execute(stmt)).scalars().all()
            if tag_name in (c.tags or [])
        ]
        return matched[offset:offset + limit], len(matched)

    count_stmt = select(func.count()).select_from(stmt.subquery())
    total = (await db.execute(count_stmt)).scalar() or 0

    result = await db.execute(stmt.offset(offset).limit(limit))
    return list(result.scalars().all()), total


async def contacts_with_any_tag(
    db: AsyncSession, location_id: uuid.UUID, names
) -> list[Contact]:
    """Contacts in the location whose tag list holds at least one of ``names``."""
    wanted = set(names)
    if not wanted:
        return []
    stmt = select(Contact).where(Contact.location_id == location_id).order_by(Contact.id)
    result = await db.execute(stmt)
    return [c for c in result.scalars().all() if wanted.intersection(c.tags or [])]


async def get_contacts_by_ids(
    db: AsyncSession, location_id: uuid.UUID, contact_ids
) -> list[Contact]:
    ids = list(dict.fromkeys(contact_ids))
    if not ids:
        return []
    stmt = select(Contact).where(Contact.location_id == location_id, Contact.id.in_(ids))
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def get_contact(
    db: AsyncSession, location_id: uuid.UUID, contact_id: uuid.UUID
) -> Contact:
    stmt = select(Contact).where(Contact.id == contact_id, Contact.location_id == location_id)
    contact = (await db.execute(stmt)).scalar_one_or_none()
    if not contact:
        raise NotFoundError("Contato não encontrado")
    return contact


async def create_contact(
    db: AsyncSession, location_id: uuid.UUID, **kwargs
) -> Contact:
    """Create a new contact. Tag usage counts are not touched."""
    kwargs["tags"] = normalize_tag_names(kwargs.get("tags"))
    contact = Contact(location_id=location_id, **kwargs)
    db.add(contact)
    await db.commit()
    await db.refresh(contact)
    return contact


async def update_contact(
    db: AsyncSession, location_id: uuid.UUID, contact_id: uuid.UUID, **kwargs
) -> Contact:
    """Update an existing contact.

    Editing ``tags`` here does not recalculate tag usage counts; they catch
    up on the next tag-side operation.
    """
    contact = await get_contact(db, location_id, contact_id)
    if "tags" in kwargs:
        kwargs["tags"] = normalize_tag_names(kwargs["tags"])
    for key, value in kwargs.items():
        setattr(contact, key, value)
    contact.touch()
    await db.commit()
    await db.refresh(contact)
    return contact


async def delete_contact(db: AsyncSession, location_id: uuid.UUID, contact_id: uuid.UUID) -> None:
    contact = await get_contact(db, location_id, contact_id)
    await db.execute(
        update(Deal).where(Deal.contact_id == contact.id).values(contact_id=None)
    )
    await db.delete(contact)
    await db.commit()
