"""Tag, tag category and deal<->tag join models."""

from __future__ import annotations

import uuid

from sqlalchemy import Boolean, ForeignKey, Integer, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, UUIDMixin, TimestampMixin, TenantMixin

DEFAULT_TAG_COLOR = "#3b82f6"
DEFAULT_CATEGORY_COLOR = "#4A90E2"


class TagCategory(UUIDMixin, TimestampMixin, TenantMixin, Base):
    __tablename__ = "tag_category"

    name: Mapped[str] = mapped_column(String(100))
    color: Mapped[str] = mapped_column(String(20), default=DEFAULT_CATEGORY_COLOR)

    # Relationships
    location: Mapped["Location"] = relationship(back_populates="tag_categories")  # noqa: F821
    tags: Mapped[list["Tag"]] = relationship(back_populates="category_ref")

    def __repr__(self) -> str:
        return f"<TagCategory {self.name!r}>"


class Tag(UUIDMixin, TimestampMixin, TenantMixin, Base):
    __tablename__ = "tag"
    __table_args__ = (UniqueConstraint("location_id", "name", name="uq_tag_location_name"),)

    name: Mapped[str] = mapped_column(String(100))
    color: Mapped[str] = mapped_column(String(20), default=DEFAULT_TAG_COLOR)
    description: Mapped[str | None] = mapped_column(Text, default=None)
    category_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("tag_category.id", ondelete="SET NULL"),
        default=None, index=True
    )
    # Denormalized copy of the category name (or free-text category)
    category: Mapped[str | None] = mapped_column(String(100), default=None)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    usage_count: Mapped[int] = mapped_column(Integer, default=0)

    # Relationships
    location: Mapped["Location"] = relationship(back_populates="tags")  # noqa: F821
    category_ref: Mapped["TagCategory | None"] = relationship(back_populates="tags")

    def __repr__(self) -> str:
        return f"<Tag {self.name!r}>"


class DealTag(Base):
    """Join table for deals <-> tags (deals reference tags by id)."""

    __tablename__ = "deal_tag"

    location_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("location.id", ondelete="CASCADE"), index=True
    )
    deal_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("deal.id", ondelete="CASCADE"), primary_key=True
    )
    tag_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("tag.id", ondelete="CASCADE"), primary_key=True, index=True
    )
