"""Tag management JSON API."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from ..models.location import Location
from ..schemas.tag import (
    CategoryCreate,
    CategoryResponse,
    CategoryUpdate,
    CategoryWithTags,
    Pagination,
    TagBulkRequest,
    TagCreate,
    TagListResponse,
    TagMerge,
    TagResponse,
    TagUpdate,
    TagUsageStat,
)
from ..services import tag_reconcile_svc, tag_svc, tag_usage_svc
from ..tenant.deps import get_current_location

router = APIRouter(prefix="/api/loc/{slug}/tags", tags=["tags"])


def _parse_id_list(raw: str | None) -> list[uuid.UUID]:
    """Parse a comma-separated id list, skipping anything that is not a UUID."""
    ids = []
    for item in (raw or "").split(","):
        item = item.strip()
        if not item:
            continue
        try:
            ids.append(uuid.UUID(item))
        except ValueError:
            continue
    return ids


# Fixed paths are registered before /{tag_id}.

@router.get("", response_model=TagListResponse)
async def list_tags(
    search: str | None = None,
    category: str | None = None,
    is_global: str | None = Query(None, alias="isGlobal"),
    sort_by: str | None = Query(None, alias="sortBy"),
    sort_order: str | None = Query(None, alias="sortOrder"),
    page: str | None = None,
    limit: str | None = None,
    location: Location = Depends(get_current_location),
    db: AsyncSession = Depends(get_db),
):
    tags, total, page_no, page_size = await tag_svc.list_tags(
        db,
        location.id,
        search=search,
        category=category,
        is_global=is_global,
        sort_by=sort_by,
        sort_order=sort_order,
        page=page,
        limit=limit,
    )
    return TagListResponse(
        data=[TagResponse.model_validate(t) for t in tags],
        pagination=Pagination(
            page=page_no,
            limit=page_size,
            total=total,
            total_pages=tag_svc.total_pages(total, page_size),
        ),
    )


@router.post("", response_model=TagResponse, status_code=201)
async def create_tag(
    data: TagCreate,
    location: Location = Depends(get_current_location),
    db: AsyncSession = Depends(get_db),
):
    return await tag_svc.create_tag(
        db,
        location.id,
        data.name,
        color=data.color,
        description=data.description,
        category_id=data.category_id,
        category=data.category,
        is_active=data.is_active,
    )


@router.post("/merge")
async def merge_tags(
    data: TagMerge,
    location: Location = Depends(get_current_location),
    db: AsyncSession = Depends(get_db),
):
    await tag_reconcile_svc.merge_tags(db, location.id, data.source_tag_ids, data.target_tag_id)
    return {"success": True, "message": "Tags mescladas com sucesso"}


@router.post("/bulk")
async def bulk_operation(
    data: TagBulkRequest,
    location: Location = Depends(get_current_location),
    db: AsyncSession = Depends(get_db),
):
    updated = await tag_reconcile_svc.bulk_apply(
        db, location.id, data.entity_type, data.entity_ids, data.tag_ids, data.operation
    )
    return {"success": True, "updated": updated}


@router.get("/categories", response_model=list[CategoryWithTags])
async def list_categories(
    location: Location = Depends(get_current_location),
    db: AsyncSession = Depends(get_db),
):
    return await tag_svc.list_categories(db, location.id)


@router.post("/categories", response_model=CategoryResponse, status_code=201)
async def create_category(
    data: CategoryCreate,
    location: Location = Depends(get_current_location),
    db: AsyncSession = Depends(get_db),
):
    return await tag_svc.create_category(db, location.id, data.name, data.color)


@router.put("/categories/{category_id}", response_model=CategoryResponse)
async def update_category(
    category_id: uuid.UUID,
    data: CategoryUpdate,
    location: Location = Depends(get_current_location),
    db: AsyncSession = Depends(get_db),
):
    return await tag_svc.update_category(
        db, location.id, category_id, name=data.name, color=data.color
    )


@router.delete("/categories/{category_id}")
async def delete_category(
    category_id: uuid.UUID,
    location: Location = Depends(get_current_location),
    db: AsyncSession = Depends(get_db),
):
    await tag_svc.delete_category(db, location.id, category_id)
    return {"success": True}


@router.get("/usage-stats", response_model=list[TagUsageStat])
async def usage_stats(
    tag_ids: str | None = Query(None, alias="tagIds"),
    location: Location = Depends(get_current_location),
    db: AsyncSession = Depends(get_db),
):
    ids = _parse_id_list(tag_ids)
    if tag_ids and tag_ids.strip() and not ids:
        return []
    return await tag_usage_svc.usage_stats(db, location.id, ids)


@router.get("/search", response_model=list[TagResponse])
async def search_tags(
    query: str | None = None,
    limit: str | None = None,
    location: Location = Depends(get_current_location),
    db: AsyncSession = Depends(get_db),
):
    return await tag_svc.search_tags(db, location.id, query, limit)


@router.get("/popular", response_model=list[TagResponse])
async def popular_tags(
    limit: str | None = None,
    location: Location = Depends(get_current_location),
    db: AsyncSession = Depends(get_db),
):
    return await tag_svc.popular_tags(db, location.id, limit)


@router.get("/{tag_id}", response_model=TagResponse)
async def get_tag(
    tag_id: uuid.UUID,
    location: Location = Depends(get_current_location),
    db: AsyncSession = Depends(get_db),
):
    return await tag_svc.get_tag(db, location.id, tag_id)


@router.put("/{tag_id}", response_model=TagResponse)
async def update_tag(
    tag_id: uuid.UUID,
    data: TagUpdate,
    location: Location = Depends(get_current_location),
    db: AsyncSession = Depends(get_db),
):
    return await tag_reconcile_svc.update_tag(
        db,
        location.id,
        tag_id,
        name=data.name,
        color=data.color,
        description=data.description,
        is_active=data.is_active,
        category_id=data.category_id,
        category=data.category,
        fields_set=data.model_fields_set,
    )


@router.delete("/{tag_id}")
async def delete_tag(
    tag_id: uuid.UUID,
    location: Location = Depends(get_current_location),
    db: AsyncSession = Depends(get_db),
):
    await tag_reconcile_svc.delete_tag(db, location.id, tag_id)
    return {"success": True}
