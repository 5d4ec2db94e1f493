"""Location (tenant) schemas."""

from __future__ import annotations

import uuid

from pydantic import Field

from .common import CamelModel


class LocationCreate(CamelModel):
    name: str = Field(min_length=1)
    slug: str | None = None
    timezone: str = "UTC"


class LocationResponse(CamelModel):
    id: uuid.UUID
    name: str
    slug: str
    timezone: str
