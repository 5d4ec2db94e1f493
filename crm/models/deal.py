"""Deal model - sales opportunities tagged through the deal_tag join table."""

from __future__ import annotations

import uuid

from datetime import datetime

from sqlalchemy import DateTime, Float, ForeignKey, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, UUIDMixin, TimestampMixin, TenantMixin


class Deal(UUIDMixin, TimestampMixin, TenantMixin, Base):
    __tablename__ = "deal"

    name: Mapped[str] = mapped_column(String(300))
    contact_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("contact.id", ondelete="SET NULL"),
        default=None, index=True
    )
    stage: Mapped[str | None] = mapped_column(String(100), default=None)
    monetary_value: Mapped[float | None] = mapped_column(Float, default=None)
    status: Mapped[str] = mapped_column(String(50), default="open")  # open, won, lost, abandoned
    closed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), default=None)

    # Relationships
    location: Mapped["Location"] = relationship(back_populates="deals")  # noqa: F821

    def __repr__(self) -> str:
        return f"<Deal {self.name!r}>"
