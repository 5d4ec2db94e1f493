"""Tag service - tenant-scoped CRUD for tags and tag categories."""

from __future__ import annotations

import math
import uuid

from sqlalchemy import asc, desc, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..config import settings
from ..errors import ConflictError, NotFoundError, ValidationError
from ..models.base import utcnow
from ..models.tag import Tag, TagCategory

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 20
MAX_LIMIT = 100
MAX_LOOKUP_LIMIT = 50

# sortBy value -> (column, default direction)
SORT_COLUMNS = {
    "name": (Tag.name, "asc"),
    "usage": (Tag.usage_count, "desc"),
    "created": (Tag.created_at, "desc"),
}


def _to_int(value, default: int) -> int:
    if value is None or value == "":
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def clamp_page(value) -> int:
    return max(_to_int(value, DEFAULT_PAGE), 1)


def clamp_limit(value, *, default: int = DEFAULT_LIMIT, maximum: int = MAX_LIMIT) -> int:
    """Zero or unparseable means the default; negatives clamp to 1."""
    limit = _to_int(value, default) or default
    return min(max(limit, 1), maximum)


def parse_bool(value) -> bool | None:
    """Parse "true"/"false" query values; anything else means unset."""
    if isinstance(value, bool):
        return value
    if value is None:
        return None
    lowered = str(value).strip().lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    return None


def total_pages(total: int, limit: int) -> int:
    return math.ceil(total / limit) or 1


def clean_tag_name(name: str | None) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise ValidationError("Tag name is required", details=[{"field": "name"}])
    return cleaned


# ── Tag lookups ────────────────────────────────────────────────────────────

async def get_tag(db: AsyncSession, location_id: uuid.UUID, tag_id: uuid.UUID) -> Tag:
    stmt = select(Tag).where(Tag.id == tag_id, Tag.location_id == location_id)
    tag = (await db.execute(stmt)).scalar_one_or_none()
    if not tag:
        raise NotFoundError("Tag não encontrada")
    return tag


async def get_tags_by_ids(
    db: AsyncSession, location_id: uuid.UUID, tag_ids
) -> list[Tag]:
    """Fetch the tenant's tags among ``tag_ids``; unknown ids are skipped."""
    ids = list(dict.fromkeys(tag_ids))
    if not ids:
        return []
    stmt = select(Tag).where(Tag.location_id == location_id, Tag.id.in_(ids))
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def find_tag_by_name(
    db: AsyncSession,
    location_id: uuid.UUID,
    name: str,
    *,
    exclude_id: uuid.UUID | None = None,
) -> Tag | None:
    """Case-insensitive name lookup within a tenant."""
    stmt = select(Tag).where(
        Tag.location_id == location_id,
        func.lower(Tag.name) == name.strip().lower(),
    )
    if exclude_id is not None:
        stmt = stmt.where(Tag.id != exclude_id)
    result = await db.execute(stmt)
    return result.scalars().first()


async def ensure_name_available(
    db: AsyncSession,
    location_id: uuid.UUID,
    name: str,
    *,
    exclude_id: uuid.UUID | None = None,
) -> None:
    existing = await find_tag_by_name(db, location_id, name, exclude_id=exclude_id)
    if existing:
        raise ConflictError(f"Tag '{existing.name}' already exists")


async def get_category(
    db: AsyncSession, location_id: uuid.UUID, category_id: uuid.UUID
) -> TagCategory:
    stmt = select(TagCategory).where(
        TagCategory.id == category_id, TagCategory.location_id == location_id
    )
    category = (await db.execute(stmt)).scalar_one_or_none()
    if not category:
        raise NotFoundError("Categoria não encontrada")
    return category


# ── Tag CRUD ───────────────────────────────────────────────────────────────

async def list_tags(
    db: AsyncSession,
    location_id: uuid.UUID,
    *,
    search: str | None = None,
    category: str | None = None,
    is_global=None,
    sort_by: str | None = None,
    sort_order: str | None = None,
    page=None,
    limit=None,
) -> tuple[list[Tag], int, int, int]:
    """List tags with filters and pagination. Returns (tags, total, page, limit)."""
    page = clamp_page(page)
    limit = clamp_limit(limit)

    stmt = select(Tag).where(Tag.location_id == location_id)

    if search and search.strip():
        q = search.strip()
        stmt = stmt.where(
            or_(
                Tag.name.icontains(q, autoescape=True),
                Tag.description.icontains(q, autoescape=True),
            )
        )

    if category and category.strip():
        wanted = category.strip().lower()
        linked = select(TagCategory.id).where(
            TagCategory.location_id == location_id,
            func.lower(TagCategory.name) == wanted,
        )
        stmt = stmt.where(
            or_(func.lower(Tag.category) == wanted, Tag.category_id.in_(linked))
        )

    # Every tag is global today; isGlobal=false narrows to active tags only.
    if parse_bool(is_global) is False:
        stmt = stmt.where(Tag.is_active.is_(True))

    count_stmt = select(func.count()).select_from(stmt.subquery())
    total = (await db.execute(count_stmt)).scalar() or 0

    column, default_direction = SORT_COLUMNS.get(sort_by or "", SORT_COLUMNS["name"])
    direction = sort_order if sort_order in ("asc", "desc") else default_direction
    order = asc(column) if direction == "asc" else desc(column)

    stmt = stmt.order_by(order, Tag.name).offset((page - 1) * limit).limit(limit)
    result = await db.execute(stmt)
    return list(result.scalars().all()), total, page, limit


async def create_tag(
    db: AsyncSession,
    location_id: uuid.UUID,
    name: str,
    *,
    color: str | None = None,
    description: str | None = None,
    category_id: uuid.UUID | None = None,
    category: str | None = None,
    is_active: bool | None = None,
) -> Tag:
    name = clean_tag_name(name)

    category_name = category
    if category_id is not None:
        linked = await get_category(db, location_id, category_id)
        category_name = linked.name

    await ensure_name_available(db, location_id, name)

    tag = Tag(
        location_id=location_id,
        name=name,
        color=color or settings.tag_default_color,
        description=description,
        category_id=category_id,
        category=category_name,
        is_active=True if is_active is None else is_active,
        usage_count=0,
    )
    db.add(tag)
    await db.commit()
    await db.refresh(tag)
    return tag


async def apply_tag_fields(
    db: AsyncSession,
    tag: Tag,
    *,
    color: str | None = None,
    description: str | None = None,
    is_active: bool | None = None,
    category_id: uuid.UUID | None = None,
    category: str | None = None,
    fields_set: set[str] | frozenset[str] = frozenset(),
) -> Tag:
    """Apply non-name field changes to a tag row without committing.

    ``fields_set`` names the fields the caller explicitly sent, so an explicit
    ``description: null`` clears the value while an omitted one is left alone.
    """
    if color:
        tag.color = color
    if "description" in fields_set:
        tag.description = description
    if is_active is not None:
        tag.is_active = is_active

    if category_id is not None:
        linked = await get_category(db, tag.location_id, category_id)
        tag.category_id = linked.id
        tag.category = linked.name
    elif "category" in fields_set:
        tag.category_id = None
        tag.category = category

    tag.touch()
    return tag


def rename_tag_row(tag: Tag, new_name: str) -> Tag:
    """Change only the tag row's name. Referencing contacts are not touched."""
    tag.name = clean_tag_name(new_name)
    tag.touch()
    return tag


async def search_tags(
    db: AsyncSession, location_id: uuid.UUID, query: str | None, limit=10
) -> list[Tag]:
    query = (query or "").strip()
    if not query:
        return []
    stmt = (
        select(Tag)
        .where(Tag.location_id == location_id, Tag.name.icontains(query, autoescape=True))
        .order_by(Tag.name)
        .limit(clamp_limit(limit, default=10, maximum=MAX_LOOKUP_LIMIT))
    )
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def popular_tags(db: AsyncSession, location_id: uuid.UUID, limit=20) -> list[Tag]:
    stmt = (
        select(Tag)
        .where(Tag.location_id == location_id)
        .order_by(Tag.usage_count.desc(), Tag.name)
        .limit(clamp_limit(limit, default=20, maximum=MAX_LOOKUP_LIMIT))
    )
    result = await db.execute(stmt)
    return list(result.scalars().all())


# ── Category CRUD ──────────────────────────────────────────────────────────

async def list_categories(db: AsyncSession, location_id: uuid.UUID) -> list[TagCategory]:
    stmt = (
        select(TagCategory)
        .where(TagCategory.location_id == location_id)
        .options(selectinload(TagCategory.tags))
        .order_by(TagCategory.name)
    )
    result = await db.execute(stmt)
    return list(result.scalars().unique().all())


async def create_category(
    db: AsyncSession, location_id: uuid.UUID, name: str, color: str | None = None
) -> TagCategory:
    name = (name or "").strip()
    if not name:
        raise ValidationError("Category name is required", details=[{"field": "name"}])
    category = TagCategory(
        location_id=location_id,
        name=name,
        color=color or settings.category_default_color,
    )
    db.add(category)
    await db.commit()
    await db.refresh(category)
    return category


async def update_category(
    db: AsyncSession,
    location_id: uuid.UUID,
    category_id: uuid.UUID,
    *,
    name: str | None = None,
    color: str | None = None,
) -> TagCategory:
    """Update a category; a rename is copied onto its member tags."""
    category = await get_category(db, location_id, category_id)
    new_name = name.strip() if name else None

    if new_name:
        category.name = new_name
    if color:
        category.color = color
    category.touch()

    if new_name:
        await db.execute(
            update(Tag)
            .where(Tag.category_id == category.id)
            .values(category=new_name, updated_at=utcnow())
        )

    await db.commit()
    await db.refresh(category)
    return category


async def delete_category(
    db: AsyncSession, location_id: uuid.UUID, category_id: uuid.UUID
) -> None:
    """Delete a category, detaching (not deleting) its tags."""
    category = await get_category(db, location_id, category_id)
    await db.execute(
        update(Tag)
        .where(Tag.category_id == category.id)
        .values(category_id=None, category=None, updated_at=utcnow())
    )
    await db.delete(category)
    await db.commit()
