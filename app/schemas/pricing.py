"""Price breakdown response shapes (GET /items/{id}/price, POST /bookings)."""

import uuid
from decimal import Decimal
from typing import Any, Optional

from app.schemas.common import BaseSchema


class AddonLineView(BaseSchema):
    id: uuid.UUID
    name: str
    price: Decimal


class TaxLineView(BaseSchema):
    applicable: bool
    percentage: Decimal
    amount: Decimal
    inherited_from: str  # item | subcategory | category | default


class PriceBreakdownView(BaseSchema):
    pricing_kind: str
    base_price: Decimal
    details: Optional[dict[str, Any]] = None
    addons: list[AddonLineView] = []
    addons_total: Decimal
    subtotal: Decimal
    tax: TaxLineView
    grand_total: Decimal


class PriceResponse(BaseSchema):
    item_id: uuid.UUID
    item_name: str
    pricing_breakdown: PriceBreakdownView
