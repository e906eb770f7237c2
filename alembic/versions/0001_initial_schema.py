"""Initial schema — catalog and bookings

Revision ID: 0001
Revises:
Create Date: 2026-10-19

"""

from typing import Sequence, Union

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql
from alembic import op

revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _id_column() -> sa.Column:
    return sa.Column(
        "id",
        postgresql.UUID(as_uuid=True),
        primary_key=True,
        server_default=sa.text("gen_random_uuid()"),
    )


def _timestamp_columns() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    # ── categories ────────────────────────────────────────────────────────────
    op.create_table(
        "categories",
        _id_column(),
        sa.Column("name", sa.String(255), nullable=False, unique=True),
        sa.Column("image", sa.String(500), nullable=True),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("tax_applicable", sa.Boolean, nullable=False, server_default="false"),
        sa.Column("tax_percentage", sa.Numeric(5, 2), nullable=True),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default="true"),
        *_timestamp_columns(),
    )
    op.create_index("ix_categories_is_active", "categories", ["is_active"])

    # ── subcategories ─────────────────────────────────────────────────────────
    op.create_table(
        "subcategories",
        _id_column(),
        sa.Column(
            "category_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("categories.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("image", sa.String(500), nullable=True),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("tax_applicable", sa.Boolean, nullable=True),
        sa.Column("tax_percentage", sa.Numeric(5, 2), nullable=True),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default="true"),
        *_timestamp_columns(),
        sa.UniqueConstraint("category_id", "name", name="uq_subcategory_name"),
    )
    op.create_index("ix_subcategories_category_id", "subcategories", ["category_id"])
    op.create_index("ix_subcategories_is_active", "subcategories", ["is_active"])

    # ── items ─────────────────────────────────────────────────────────────────
    op.create_table(
        "items",
        _id_column(),
        sa.Column(
            "category_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("categories.id", ondelete="RESTRICT"),
            nullable=True,
        ),
        sa.Column(
            "subcategory_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("subcategories.id", ondelete="RESTRICT"),
            nullable=True,
        ),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("image", sa.String(500), nullable=True),
        sa.Column(
            "pricing_kind",
            sa.String(16),
            nullable=False,
            comment="static | tiered | complimentary | discounted | dynamic",
        ),
        sa.Column(
            "pricing_config",
            postgresql.JSONB,
            nullable=False,
            server_default=sa.text("'{}'::jsonb"),
        ),
        sa.Column("tax_applicable", sa.Boolean, nullable=True),
        sa.Column("tax_percentage", sa.Numeric(5, 2), nullable=True),
        sa.Column("is_bookable", sa.Boolean, nullable=False, server_default="false"),
        sa.Column("availability_config", postgresql.JSONB, nullable=True),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default="true"),
        *_timestamp_columns(),
        sa.CheckConstraint(
            "(category_id IS NULL) <> (subcategory_id IS NULL)",
            name="ck_item_single_parent",
        ),
    )
    op.create_index("ix_items_category_id", "items", ["category_id"])
    op.create_index("ix_items_subcategory_id", "items", ["subcategory_id"])
    op.create_index("ix_items_pricing_kind", "items", ["pricing_kind"])
    op.create_index("ix_items_is_active", "items", ["is_active"])

    # ── addons ────────────────────────────────────────────────────────────────
    op.create_table(
        "addons",
        _id_column(),
        sa.Column(
            "item_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("items.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("price", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("is_mandatory", sa.Boolean, nullable=False, server_default="false"),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default="true"),
        *_timestamp_columns(),
    )
    op.create_index("ix_addons_item_id", "addons", ["item_id"])
    op.create_index("ix_addons_is_active", "addons", ["is_active"])

    # ── bookings ──────────────────────────────────────────────────────────────
    op.create_table(
        "bookings",
        _id_column(),
        sa.Column(
            "item_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("items.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column("booking_date", sa.Date, nullable=False),
        sa.Column("start_time", sa.Time, nullable=False),
        sa.Column("end_time", sa.Time, nullable=False),
        sa.Column("customer_name", sa.String(255), nullable=False),
        sa.Column("customer_email", sa.String(255), nullable=True),
        sa.Column("customer_phone", sa.String(20), nullable=True),
        sa.Column("base_price", sa.Numeric(10, 2), nullable=False),
        sa.Column("addons_total", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("tax_amount", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("grand_total", sa.Numeric(10, 2), nullable=False),
        sa.Column(
            "status",
            sa.String(16),
            nullable=False,
            server_default="confirmed",
            comment="pending | confirmed | cancelled | completed",
        ),
        sa.Column("notes", sa.Text, nullable=True),
        *_timestamp_columns(),
        sa.CheckConstraint("end_time > start_time", name="ck_booking_time_order"),
    )
    op.create_index("ix_bookings_item_id", "bookings", ["item_id"])
    op.create_index("ix_bookings_booking_date", "bookings", ["booking_date"])
    op.create_index("ix_bookings_status", "bookings", ["status"])
    # Conflict scan: active bookings for one item on one date, by start time
    op.create_index(
        "ix_bookings_item_date_start",
        "bookings",
        ["item_id", "booking_date", "start_time"],
    )


def downgrade() -> None:
    # Drop in reverse dependency order
    op.drop_table("bookings")
    op.drop_table("addons")
    op.drop_table("items")
    op.drop_table("subcategories")
    op.drop_table("categories")
