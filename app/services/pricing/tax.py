"""
Tax inheritance resolver.

Resolution order (first match wins):
  1. item's own override           → source "item"
  2. subcategory's own override    → source "subcategory"
  3. the category at the top       → source "category"  (unset flag = no tax)
  4. nothing known                 → source "default"   (no tax)

A subcategory that explicitly says tax_applicable=False stops inheritance.
Never raises: missing data degrades to "no tax".
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional


class TaxSource:
    ITEM = "item"
    SUBCATEGORY = "subcategory"
    CATEGORY = "category"
    DEFAULT = "default"


@dataclass(frozen=True)
class TaxPolicy:
    applicable: bool
    percentage: Decimal
    source: str


NO_TAX = TaxPolicy(applicable=False, percentage=Decimal("0"), source=TaxSource.DEFAULT)


def _percentage(value) -> Decimal:
    return Decimal(value) if value is not None else Decimal("0")


def resolve_tax(item, subcategory=None, category=None) -> TaxPolicy:
    """
    Args:
        item:        anything with tax_applicable / tax_percentage
        subcategory: the item's subcategory, if it has one
        category:    the subcategory's category, or the item's direct category
    """
    if item.tax_applicable is not None:
        return TaxPolicy(
            applicable=bool(item.tax_applicable),
            percentage=_percentage(item.tax_percentage),
            source=TaxSource.ITEM,
        )

    if subcategory is not None and subcategory.tax_applicable is not None:
        return TaxPolicy(
            applicable=bool(subcategory.tax_applicable),
            percentage=_percentage(subcategory.tax_percentage),
            source=TaxSource.SUBCATEGORY,
        )

    if category is not None:
        return TaxPolicy(
            applicable=bool(category.tax_applicable),
            percentage=_percentage(category.tax_percentage),
            source=TaxSource.CATEGORY,
        )

    return NO_TAX


def resolve_item_tax(item) -> TaxPolicy:
    """Resolve using the item's loaded hierarchy (subcategory → category, or direct category)."""
    subcategory: Optional[object] = item.subcategory
    category = subcategory.category if subcategory is not None else item.category
    return resolve_tax(item, subcategory, category)
