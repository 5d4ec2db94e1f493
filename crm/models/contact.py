"""Contact model.

Contacts carry their tags as an ordered list of tag *names* rather than
foreign keys. Tag renames, merges and deletes rewrite this list in place.
"""

from __future__ import annotations

from sqlalchemy import JSON, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, UUIDMixin, TimestampMixin, TenantMixin


class Contact(UUIDMixin, TimestampMixin, TenantMixin, Base):
    __tablename__ = "contact"
    __table_args__ = (
        Index("ix_contact_location_email", "location_id", "email"),
    )

    first_name: Mapped[str | None] = mapped_column(String(100), default=None)
    last_name: Mapped[str | None] = mapped_column(String(100), default=None)
    email: Mapped[str | None] = mapped_column(String(255), default=None, index=True)
    phone: Mapped[str | None] = mapped_column(String(50), default=None)
    company_name: Mapped[str | None] = mapped_column(String(200), default=None)
    source: Mapped[str | None] = mapped_column(String(100), default=None)
    # Always reassign a new list; in-place mutation is not tracked.
    tags: Mapped[list[str]] = mapped_column(JSON, default=list)

    # Relationships
    location: Mapped["Location"] = relationship(back_populates="contacts")  # noqa: F821

    @property
    def full_name(self) -> str:
        parts = [p for p in (self.first_name, self.last_name) if p]
        return " ".join(parts) or "Unnamed"

    def __repr__(self) -> str:
        return f"<Contact {self.full_name!r}>"
