"""Initial CRM schema: locations, contacts, deals, tags.

Revision ID: 001_initial
Revises:
Create Date: 2026-10-19

"""
from alembic import op
import sqlalchemy as sa

revision = "001_initial"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    ]


def _location_fk() -> sa.Column:
    return sa.Column(
        "location_id", sa.Uuid, sa.ForeignKey("location.id", ondelete="CASCADE"), nullable=False
    )


def upgrade() -> None:
    # Location (tenant root)
    op.create_table(
        "location",
        sa.Column("id", sa.Uuid, primary_key=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("slug", sa.String(100), nullable=False),
        sa.Column("timezone", sa.String(50), server_default="UTC"),
        *_timestamps(),
    )
    op.create_index("ix_location_slug", "location", ["slug"], unique=True)

    # Contact (tags stored as a JSON list of names)
    op.create_table(
        "contact",
        sa.Column("id", sa.Uuid, primary_key=True),
        _location_fk(),
        sa.Column("first_name", sa.String(100)),
        sa.Column("last_name", sa.String(100)),
        sa.Column("email", sa.String(255)),
        sa.Column("phone", sa.String(50)),
        sa.Column("company_name", sa.String(200)),
        sa.Column("source", sa.String(100)),
        sa.Column("tags", sa.JSON, nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_contact_location_id", "contact", ["location_id"])
    op.create_index("ix_contact_email", "contact", ["email"])
    op.create_index("ix_contact_location_email", "contact", ["location_id", "email"])

    # Deal
    op.create_table(
        "deal",
        sa.Column("id", sa.Uuid, primary_key=True),
        _location_fk(),
        sa.Column("name", sa.String(300), nullable=False),
        sa.Column("contact_id", sa.Uuid, sa.ForeignKey("contact.id", ondelete="SET NULL")),
        sa.Column("stage", sa.String(100)),
        sa.Column("monetary_value", sa.Float),
        sa.Column("status", sa.String(50), nullable=False, server_default="open"),
        sa.Column("closed_at", sa.DateTime(timezone=True)),
        *_timestamps(),
    )
    op.create_index("ix_deal_location_id", "deal", ["location_id"])
    op.create_index("ix_deal_contact_id", "deal", ["contact_id"])

    # Tag categories
    op.create_table(
        "tag_category",
        sa.Column("id", sa.Uuid, primary_key=True),
        _location_fk(),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("color", sa.String(20), nullable=False, server_default="#4A90E2"),
        *_timestamps(),
    )
    op.create_index("ix_tag_category_location_id", "tag_category", ["location_id"])

    # Tags
    op.create_table(
        "tag",
        sa.Column("id", sa.Uuid, primary_key=True),
        _location_fk(),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("color", sa.String(20), nullable=False, server_default="#3b82f6"),
        sa.Column("description", sa.Text),
        sa.Column(
            "category_id", sa.Uuid, sa.ForeignKey("tag_category.id", ondelete="SET NULL")
        ),
        sa.Column("category", sa.String(100)),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("usage_count", sa.Integer, nullable=False, server_default="0"),
        *_timestamps(),
        sa.UniqueConstraint("location_id", "name", name="uq_tag_location_name"),
    )
    op.create_index("ix_tag_location_id", "tag", ["location_id"])
    op.create_index("ix_tag_category_id", "tag", ["category_id"])

    # Deal <-> tag links
    op.create_table(
        "deal_tag",
        _location_fk(),
        sa.Column(
            "deal_id", sa.Uuid, sa.ForeignKey("deal.id", ondelete="CASCADE"), primary_key=True
        ),
        sa.Column(
            "tag_id", sa.Uuid, sa.ForeignKey("tag.id", ondelete="CASCADE"), primary_key=True
        ),
    )
    op.create_index("ix_deal_tag_location_id", "deal_tag", ["location_id"])
    op.create_index("ix_deal_tag_tag_id", "deal_tag", ["tag_id"])


def downgrade() -> None:
    op.drop_table("deal_tag")
    op.drop_table("tag")
    op.drop_table("tag_category")
    op.drop_table("deal")
    op.drop_table("contact")
    op.drop_table("location")
