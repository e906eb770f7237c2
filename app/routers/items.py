"""
Item routes: catalog management plus the two read-side engine operations.

  GET    /items                          → paginated list (search, sort, filters)
  POST   /items                          → create (with addons)
  GET    /items/{id}                     → detail with parents and active addons
  PUT    /items/{id}                     → partial update, merged config re-checked
  DELETE /items/{id}                     → soft delete (is_active = false)
  GET    /items/{id}/price               → full price breakdown
  GET    /items/{id}/available-slots     → windows + booked ranges for a date
"""

import uuid
from datetime import date
from decimal import Decimal
from typing import Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.schemas.booking import AvailableSlotsResponse
from app.schemas.catalog import ItemCreate, ItemResponse, ItemUpdate, Page, Pagination
from app.schemas.common import MessageResponse
from app.schemas.pricing import PriceResponse
from app.services import catalog
from app.services.booking.availability import get_available_slots
from app.services.pricing.breakdown import calculate_price
from app.services.pricing.strategies import PricingParams
from app.settings import settings

router = APIRouter(prefix="/items", tags=["items"])


def _parse_addon_ids(raw: Optional[str]) -> list[uuid.UUID]:
    """'id1,id2' → [UUID, UUID]. Blank entries are ignored."""
    if not raw:
        return []
    try:
        return [uuid.UUID(part.strip()) for part in raw.split(",") if part.strip()]
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="addons must be a comma-separated list of UUIDs",
        )


# ── Listing / CRUD ────────────────────────────────────────────────────────────

@router.get("", response_model=Page[ItemResponse])
def list_items(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    sort_by: Literal["name", "created_at", "updated_at", "pricing_kind"] = "name",
    order: Literal["asc", "desc"] = "asc",
    search: Optional[str] = None,
    category_id: Optional[uuid.UUID] = None,
    subcategory_id: Optional[uuid.UUID] = None,
    pricing_kind: Optional[
        Literal["static", "tiered", "complimentary", "discounted", "dynamic"]
    ] = None,
    active: Optional[bool] = None,
    min_price: Optional[float] = Query(None, ge=0),
    max_price: Optional[float] = Query(None, ge=0),
    db: Session = Depends(get_db),
) -> Page[ItemResponse]:
    """
    min_price / max_price restrict the listing to static items whose
    base_price falls inside the range.
    """
    result = catalog.list_items(
        db,
        catalog.PageRequest(
            page=page, limit=limit, sort_by=sort_by, order=order, search=search, active=active
        ),
        catalog.ItemFilters(
            category_id=category_id,
            subcategory_id=subcategory_id,
            pricing_kind=pricing_kind,
            min_price=min_price,
            max_price=max_price,
        ),
    )
    return Page[ItemResponse](
        data=[ItemResponse.model_validate(item) for item in result.rows],
        pagination=Pagination(
            total=result.total,
            page=result.page,
            limit=result.limit,
            total_pages=result.total_pages,
        ),
    )


@router.post("", response_model=ItemResponse, status_code=status.HTTP_201_CREATED)
def create_item(payload: ItemCreate, db: Session = Depends(get_db)) -> ItemResponse:
    return ItemResponse.model_validate(catalog.create_item(db, payload))


@router.get("/{item_id}", response_model=ItemResponse)
def get_item(item_id: uuid.UUID, db: Session = Depends(get_db)) -> ItemResponse:
    return ItemResponse.model_validate(catalog.get_item(db, item_id))


@router.put("/{item_id}", response_model=ItemResponse)
def update_item(
    item_id: uuid.UUID,
    payload: ItemUpdate,
    db: Session = Depends(get_db),
) -> ItemResponse:
    return ItemResponse.model_validate(catalog.update_item(db, item_id, payload))


@router.delete("/{item_id}", response_model=MessageResponse)
def delete_item(item_id: uuid.UUID, db: Session = Depends(get_db)) -> MessageResponse:
    catalog.deactivate_item(db, item_id)
    return MessageResponse(message="Item deactivated successfully")


# ── Pricing / availability ────────────────────────────────────────────────────

@router.get("/{item_id}/price", response_model=PriceResponse)
def get_item_price(
    item_id: uuid.UUID,
    units: Optional[Decimal] = Query(None, ge=0),
    duration: Optional[Decimal] = Query(None, ge=0, description="Hours"),
    time: Optional[str] = Query(None, description="HH:MM, required for dynamic pricing"),
    addons: Optional[str] = Query(None, description="Comma-separated addon ids"),
    db: Session = Depends(get_db),
) -> PriceResponse:
    result = calculate_price(
        db,
        item_id,
        PricingParams(
            units=units,
            duration=duration,
            time=time,
            addons=_parse_addon_ids(addons),
        ),
    )
    return PriceResponse.model_validate(result)


@router.get("/{item_id}/available-slots", response_model=AvailableSlotsResponse)
def get_item_available_slots(
    item_id: uuid.UUID,
    booking_date: date = Query(..., alias="date", description="YYYY-MM-DD"),
    db: Session = Depends(get_db),
) -> AvailableSlotsResponse:
    return AvailableSlotsResponse.model_validate(
        get_available_slots(db, item_id, booking_date)
    )
