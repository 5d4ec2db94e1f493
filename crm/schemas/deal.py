"""Deal schemas."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Literal

from .common import CamelModel

DealStatus = Literal["open", "won", "lost", "abandoned"]


class DealCreate(CamelModel):
    name: str
    contact_id: uuid.UUID | None = None
    stage: str | None = None
    monetary_value: float | None = None
    status: DealStatus = "open"


class DealUpdate(CamelModel):
    name: str | None = None
    contact_id: uuid.UUID | None = None
    stage: str | None = None
    monetary_value: float | None = None
    status: DealStatus | None = None


class DealResponse(CamelModel):
    id: uuid.UUID
    name: str
    contact_id: uuid.UUID | None = None
    stage: str | None = None
    monetary_value: float | None = None
    status: str
    closed_at: datetime | None = None
    tag_ids: list[uuid.UUID] = []
