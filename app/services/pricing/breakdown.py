"""
Price Breakdown Builder.

Composes base price (strategy engine) + selected addons + inherited tax into
the full monetary breakdown:

    subtotal    = base_price + addons_total
    tax_amount  = subtotal × percentage / 100   (if tax applies)
    grand_total = subtotal + tax_amount

Arithmetic runs at full Decimal precision; every money field is rounded to
cents (ROUND_HALF_UP) only when the breakdown is produced.
"""

import logging
import uuid
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional

from sqlalchemy.orm import Session

from app.models.catalog import Item
from app.repositories.catalog import CatalogStore
from app.services.errors import ItemInactive, ItemNotFound
from app.services.pricing.strategies import PricingParams, calculate_base_price
from app.services.pricing.tax import resolve_item_tax

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")


def money(value: Decimal) -> Decimal:
    return Decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)


@dataclass
class AddonLine:
    id: uuid.UUID
    name: str
    price: Decimal


@dataclass
class TaxLine:
    applicable: bool
    percentage: Decimal
    amount: Decimal
    inherited_from: str


@dataclass
class PriceBreakdown:
    pricing_kind: str
    base_price: Decimal
    addons_total: Decimal
    subtotal: Decimal
    tax: TaxLine
    grand_total: Decimal
    addons: list[AddonLine] = field(default_factory=list)
    details: Optional[dict[str, Any]] = None


@dataclass
class PriceResult:
    item_id: uuid.UUID
    item_name: str
    pricing_breakdown: PriceBreakdown


class PriceBreakdownBuilder:
    """
    Usage:
        builder = PriceBreakdownBuilder(CatalogStore(db))
        result = builder.build(item_id, PricingParams(units=Decimal("3")))
    """

    def __init__(self, catalog: CatalogStore):
        self.catalog = catalog

    def build(self, item_id: uuid.UUID, params: PricingParams) -> PriceResult:
        item = self.catalog.get_item_with_ancestors(item_id)
        if item is None:
            raise ItemNotFound(item_id)
        if not item.is_active:
            raise ItemInactive(item_id)
        return self.build_for_item(item, params)

    def build_for_item(self, item: Item, params: PricingParams) -> PriceResult:
        """Breakdown for an already-loaded (and already-checked) item."""
        quote = calculate_base_price(item.pricing_kind, item.pricing_config, params)

        addons = self.catalog.get_addons_by_ids(params.addons, item_id=item.id)
        addons_total = sum((Decimal(a.price) for a in addons), Decimal("0"))

        subtotal = quote.base_price + addons_total
        tax_policy = resolve_item_tax(item)
        tax_amount = (
            subtotal * tax_policy.percentage / 100
            if tax_policy.applicable
            else Decimal("0")
        )
        grand_total = subtotal + tax_amount

        breakdown = PriceBreakdown(
            pricing_kind=item.pricing_kind,
            base_price=money(quote.base_price),
            addons=[AddonLine(id=a.id, name=a.name, price=money(a.price)) for a in addons],
            addons_total=money(addons_total),
            subtotal=money(subtotal),
            tax=TaxLine(
                applicable=tax_policy.applicable,
                percentage=tax_policy.percentage,
                amount=money(tax_amount),
                inherited_from=tax_policy.source,
            ),
            grand_total=money(grand_total),
            details=quote.details,
        )
        logger.debug(
            "Priced item %s (%s): grand_total=%s",
            item.id,
            item.pricing_kind,
            breakdown.grand_total,
        )
        return PriceResult(item_id=item.id, item_name=item.name, pricing_breakdown=breakdown)


def calculate_price(db: Session, item_id: uuid.UUID, params: PricingParams) -> PriceResult:
    """Full price breakdown for an item. Read-only; safe to call concurrently."""
    return PriceBreakdownBuilder(CatalogStore(db)).build(item_id, params)
