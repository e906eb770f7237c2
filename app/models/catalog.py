"""
Catalog entities: Category, Subcategory, Item, Addon.

Tax configuration lives on all three hierarchy levels; a NULL
tax_applicable on Item or Subcategory means "inherit from the parent".
Pricing and availability configuration live on Item only.
"""

import uuid
from decimal import Decimal
from typing import TYPE_CHECKING, Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    ForeignKey,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base, JSONDocument, TimestampMixin, UUIDPrimaryKeyMixin

if TYPE_CHECKING:
    from app.models.booking import Booking


# ── Enums (stored as strings for readability + migration safety) ────────────


class PricingKind:
    STATIC = "static"
    TIERED = "tiered"
    COMPLIMENTARY = "complimentary"
    DISCOUNTED = "discounted"
    DYNAMIC = "dynamic"

    ALL = [STATIC, TIERED, COMPLIMENTARY, DISCOUNTED, DYNAMIC]


# ── Models ──────────────────────────────────────────────────────────────────


class Category(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """Top of the catalog hierarchy. Its tax setting is the last fallback."""

    __tablename__ = "categories"

    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    image: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    tax_applicable: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default="false"
    )
    tax_percentage: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(5, 2), nullable=True
    )

    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default="true", index=True
    )

    # Relationships
    subcategories: Mapped[list["Subcategory"]] = relationship(
        "Subcategory", back_populates="category"
    )
    items: Mapped[list["Item"]] = relationship("Item", back_populates="category")

    def __repr__(self) -> str:
        return f"<Category name={self.name!r}>"


class Subcategory(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    __tablename__ = "subcategories"
    __table_args__ = (
        UniqueConstraint("category_id", "name", name="uq_subcategory_name"),
    )

    category_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("categories.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    image: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # NULL = inherit from category
    tax_applicable: Mapped[Optional[bool]] = mapped_column(Boolean, nullable=True)
    tax_percentage: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(5, 2), nullable=True
    )

    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default="true", index=True
    )

    # Relationships
    category: Mapped["Category"] = relationship(
        "Category", back_populates="subcategories"
    )
    items: Mapped[list["Item"]] = relationship("Item", back_populates="subcategory")

    def __repr__(self) -> str:
        return f"<Subcategory name={self.name!r}>"


class Item(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """
    A sellable (and optionally bookable) catalog entry.

    pricing_config shapes by pricing_kind:
      static:        {"base_price": 200}
      tiered:        {"tiers": [{"max_units": 1, "price": 300}, ...]}
      complimentary: {}
      discounted:    {"base_price": 500, "discount": {"type": "percentage", "value": 10}}
      dynamic:       {"time_windows": [{"start": "08:00", "end": "11:00", "price": 199}, ...]}

    availability_config:
      {"days": ["Monday", ...], "time_slots": [{"start": "09:00", "end": "18:00"}]}
    """

    __tablename__ = "items"
    __table_args__ = (
        # Exactly one parent: category XOR subcategory
        CheckConstraint(
            "(category_id IS NULL) <> (subcategory_id IS NULL)",
            name="ck_item_single_parent",
        ),
    )

    category_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("categories.id", ondelete="RESTRICT"),
        nullable=True,
        index=True,
    )
    subcategory_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("subcategories.id", ondelete="RESTRICT"),
        nullable=True,
        index=True,
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    image: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    pricing_kind: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        index=True,
        comment="static | tiered | complimentary | discounted | dynamic",
    )
    pricing_config: Mapped[dict] = mapped_column(
        JSONDocument, nullable=False, default=dict
    )

    # NULL = inherit from subcategory / category
    tax_applicable: Mapped[Optional[bool]] = mapped_column(Boolean, nullable=True)
    tax_percentage: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(5, 2), nullable=True
    )

    is_bookable: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default="false"
    )
    availability_config: Mapped[Optional[dict]] = mapped_column(
        JSONDocument, nullable=True
    )

    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default="true", index=True
    )

    # Relationships
    category: Mapped[Optional["Category"]] = relationship(
        "Category", back_populates="items"
    )
    subcategory: Mapped[Optional["Subcategory"]] = relationship(
        "Subcategory", back_populates="items"
    )
    addons: Mapped[list["Addon"]] = relationship(
        "Addon", back_populates="item", cascade="all, delete-orphan"
    )
    bookings: Mapped[list["Booking"]] = relationship("Booking", back_populates="item")

    def __repr__(self) -> str:
        return f"<Item name={self.name!r} pricing_kind={self.pricing_kind!r}>"


class Addon(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    __tablename__ = "addons"

    item_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("items.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    price: Mapped[Decimal] = mapped_column(
        Numeric(10, 2), nullable=False, default=Decimal("0")
    )
    # Informational only; selection is driven by the caller's addon id list
    is_mandatory: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default="false"
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default="true", index=True
    )

    item: Mapped["Item"] = relationship("Item", back_populates="addons")

    def __repr__(self) -> str:
        return f"<Addon name={self.name!r} price={self.price}>"
