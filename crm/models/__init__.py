"""CRM models - re-exports all models and Base.metadata."""

from .base import Base, UUIDMixin, TimestampMixin, TenantMixin
from .location import Location
from .contact import Contact
from .deal import Deal
from .tag import Tag, TagCategory, DealTag

__all__ = [
    "Base",
    "UUIDMixin",
    "TimestampMixin",
    "TenantMixin",
    "Location",
    "Contact",
    "Deal",
    "Tag",
    "TagCategory",
    "DealTag",
]
