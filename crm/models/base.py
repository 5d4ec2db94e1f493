"""Base model classes and mixins for CRM models."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, Uuid, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class UUIDMixin:
    """Adds a UUID primary key."""

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )


class TimestampMixin:
    """Adds created_at / updated_at columns."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    def touch(self) -> None:
        """Stamp updated_at client-side; the server onupdate would expire it."""
        self.updated_at = utcnow()


class TenantMixin:
    """Adds location_id FK for multi-tenant isolation."""

    location_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("location.id", ondelete="CASCADE"),
        index=True,
    )
