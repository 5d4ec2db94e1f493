"""Contact schemas."""

from __future__ import annotations

import uuid
from datetime import datetime

from .common import CamelModel


class ContactCreate(CamelModel):
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    phone: str | None = None
    company_name: str | None = None
    source: str | None = None
    tags: list[str] = []


class ContactUpdate(CamelModel):
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    phone: str | None = None
    company_name: str | None = None
    source: str | None = None
    tags: list[str] | None = None


class ContactResponse(ContactCreate):
    id: uuid.UUID
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ContactListResponse(CamelModel):
    data: list[ContactResponse]
    total: int
