"""
Catalog schemas — Category, Subcategory, Item, Addon request/response shapes.

Item config is validated on write with the same typed models the pricing and
booking services use on read (app.schemas.config), so a stored config that
passed the API is always parseable later.
"""

import uuid
from decimal import Decimal
from typing import Any, Generic, Optional, TypeVar

from pydantic import Field, ValidationError, field_validator, model_validator

from app.models.catalog import PricingKind
from app.schemas.common import BaseSchema, TimestampedSchema
from app.schemas.config import AvailabilityConfig, load_pricing_config

T = TypeVar("T")

TaxPercentage = Field(default=None, ge=0, le=100)


# ── Category ─────────────────────────────────────────────────────────────────


class CategoryCreate(BaseSchema):
    name: str = Field(..., min_length=2, max_length=255)
    image: Optional[str] = Field(default=None, max_length=500)
    description: Optional[str] = None
    tax_applicable: bool = False
    tax_percentage: Optional[Decimal] = TaxPercentage
    is_active: bool = True

    @model_validator(mode="after")
    def validate_tax(self):
        if self.tax_applicable and self.tax_percentage is None:
            raise ValueError("Tax percentage is required when tax is applicable")
        return self


class CategoryUpdate(BaseSchema):
    name: Optional[str] = Field(default=None, min_length=2, max_length=255)
    image: Optional[str] = Field(default=None, max_length=500)
    description: Optional[str] = None
    tax_applicable: Optional[bool] = None
    tax_percentage: Optional[Decimal] = TaxPercentage
    is_active: Optional[bool] = None


class CategoryResponse(TimestampedSchema):
    name: str
    image: Optional[str]
    description: Optional[str]
    tax_applicable: bool
    tax_percentage: Optional[Decimal]
    is_active: bool


# ── Subcategory ──────────────────────────────────────────────────────────────


class SubcategoryCreate(BaseSchema):
    name: str = Field(..., min_length=2, max_length=255)
    image: Optional[str] = Field(default=None, max_length=500)
    description: Optional[str] = None
    # None = inherit from category
    tax_applicable: Optional[bool] = None
    tax_percentage: Optional[Decimal] = TaxPercentage
    is_active: bool = True


class SubcategoryUpdate(BaseSchema):
    name: Optional[str] = Field(default=None, min_length=2, max_length=255)
    image: Optional[str] = Field(default=None, max_length=500)
    description: Optional[str] = None
    tax_applicable: Optional[bool] = None
    tax_percentage: Optional[Decimal] = TaxPercentage
    is_active: Optional[bool] = None


class SubcategoryResponse(TimestampedSchema):
    category_id: uuid.UUID
    name: str
    image: Optional[str]
    description: Optional[str]
    tax_applicable: Optional[bool]
    tax_percentage: Optional[Decimal]
    is_active: bool


class CategoryDetail(CategoryResponse):
    subcategories: list[SubcategoryResponse] = []

    @field_validator("subcategories", mode="before")
    @classmethod
    def active_subcategories_only(cls, v):
        return [s for s in v if getattr(s, "is_active", True)]


# ── Addon ────────────────────────────────────────────────────────────────────


class AddonCreate(BaseSchema):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    price: Decimal = Field(default=Decimal("0"), ge=0)
    is_mandatory: bool = False
    is_active: bool = True


class AddonResponse(BaseSchema):
    id: uuid.UUID
    name: str
    description: Optional[str]
    price: Decimal
    is_mandatory: bool
    is_active: bool


# ── Item ─────────────────────────────────────────────────────────────────────


def check_item_config(
    pricing_kind: str,
    pricing_config: Optional[dict],
    is_bookable: bool,
    availability_config: Optional[dict],
) -> None:
    """Raise ValueError if the pricing/availability config does not fit the item."""
    if pricing_kind not in PricingKind.ALL:
        raise ValueError(f"pricing_kind must be one of: {PricingKind.ALL}")
    try:
        load_pricing_config(pricing_kind, pricing_config)
    except ValidationError as exc:
        raise ValueError(f"Invalid {pricing_kind} pricing_config: {exc.errors()[0]['msg']}")
    if availability_config is not None:
        if not is_bookable:
            raise ValueError("availability_config is only allowed on bookable items")
        try:
            AvailabilityConfig.model_validate(availability_config)
        except ValidationError as exc:
            raise ValueError(f"Invalid availability_config: {exc.errors()[0]['msg']}")


class ItemCreate(BaseSchema):
    category_id: Optional[uuid.UUID] = None
    subcategory_id: Optional[uuid.UUID] = None
    name: str = Field(..., min_length=2, max_length=255)
    description: Optional[str] = None
    image: Optional[str] = Field(default=None, max_length=500)
    pricing_kind: str
    pricing_config: dict[str, Any] = Field(default_factory=dict)
    # None = inherit from subcategory / category
    tax_applicable: Optional[bool] = None
    tax_percentage: Optional[Decimal] = TaxPercentage
    is_bookable: bool = False
    availability_config: Optional[dict[str, Any]] = None
    is_active: bool = True
    addons: list[AddonCreate] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_item(self):
        if (self.category_id is None) == (self.subcategory_id is None):
            raise ValueError(
                "Item must belong to exactly one of category_id or subcategory_id"
            )
        check_item_config(
            self.pricing_kind,
            self.pricing_config,
            self.is_bookable,
            self.availability_config,
        )
        return self


class ItemUpdate(BaseSchema):
    """
    Partial update. Parent and config fields are re-checked against the
    merged item in the router, since validity depends on both old and new values.
    """

    category_id: Optional[uuid.UUID] = None
    subcategory_id: Optional[uuid.UUID] = None
    name: Optional[str] = Field(default=None, min_length=2, max_length=255)
    description: Optional[str] = None
    image: Optional[str] = Field(default=None, max_length=500)
    pricing_kind: Optional[str] = None
    pricing_config: Optional[dict[str, Any]] = None
    tax_applicable: Optional[bool] = None
    tax_percentage: Optional[Decimal] = TaxPercentage
    is_bookable: Optional[bool] = None
    availability_config: Optional[dict[str, Any]] = None
    is_active: Optional[bool] = None


class ParentSummary(BaseSchema):
    id: uuid.UUID
    name: str
    tax_applicable: Optional[bool]
    tax_percentage: Optional[Decimal]


class ItemResponse(TimestampedSchema):
    category_id: Optional[uuid.UUID]
    subcategory_id: Optional[uuid.UUID]
    name: str
    description: Optional[str]
    image: Optional[str]
    pricing_kind: str
    pricing_config: dict[str, Any]
    tax_applicable: Optional[bool]
    tax_percentage: Optional[Decimal]
    is_bookable: bool
    availability_config: Optional[dict[str, Any]]
    is_active: bool
    category: Optional[ParentSummary] = None
    subcategory: Optional[ParentSummary] = None
    addons: list[AddonResponse] = []

    @field_validator("addons", mode="before")
    @classmethod
    def active_addons_only(cls, v):
        return [a for a in v if getattr(a, "is_active", True)]


# ── Pagination ───────────────────────────────────────────────────────────────


class Pagination(BaseSchema):
    total: int
    page: int
    limit: int
    total_pages: int


class Page(BaseSchema, Generic[T]):
    data: list[T]
    pagination: Pagination
