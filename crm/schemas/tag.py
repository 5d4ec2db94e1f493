"""Tag, tag category, merge and bulk-operation schemas."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Literal

from pydantic import Field

from .common import CamelModel

EntityType = Literal["contact", "deal", "ticket", "conversation"]
BulkOperation = Literal["add", "remove", "replace"]


class TagCreate(CamelModel):
    name: str = Field(min_length=1)
    color: str | None = None
    description: str | None = None
    category_id: uuid.UUID | None = None
    category: str | None = None
    is_active: bool | None = None


class TagUpdate(CamelModel):
    name: str | None = Field(default=None, min_length=1)
    color: str | None = None
    description: str | None = None
    category_id: uuid.UUID | None = None
    category: str | None = None
    is_active: bool | None = None


class TagResponse(CamelModel):
    id: uuid.UUID
    location_id: uuid.UUID
    name: str
    color: str
    description: str | None = None
    category_id: uuid.UUID | None = None
    category: str | None = None
    is_global: bool = True
    is_active: bool = True
    usage_count: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None


class Pagination(CamelModel):
    page: int
    limit: int
    total: int
    total_pages: int


class TagListResponse(CamelModel):
    data: list[TagResponse]
    pagination: Pagination


class TagMerge(CamelModel):
    source_tag_ids: list[uuid.UUID] = Field(min_length=1)
    target_tag_id: uuid.UUID


class TagBulkRequest(CamelModel):
    entity_type: EntityType
    entity_ids: list[uuid.UUID] = Field(min_length=1)
    tag_ids: list[uuid.UUID] = Field(min_length=1)
    operation: BulkOperation


class CategoryCreate(CamelModel):
    name: str = Field(min_length=1)
    color: str | None = None


class CategoryUpdate(CamelModel):
    name: str | None = Field(default=None, min_length=1)
    color: str | None = None


class CategoryResponse(CamelModel):
    id: uuid.UUID
    name: str
    color: str


class CategoryWithTags(CategoryResponse):
    tags: list[TagResponse] = []


class TagUsageStat(CamelModel):
    tag_id: uuid.UUID
    tag_name: str
    contacts: int = 0
    companies: int = 0
    deals: int = 0
    tickets: int = 0
    conversations: int = 0
    total: int = 0
