"""
Booking routes.

  POST  /bookings               → admit a booking (201) and return it with its price breakdown
  GET   /bookings/{id}          → booking detail
  PATCH /bookings/{id}/cancel   → pending / confirmed → cancelled
"""

import uuid

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.schemas.booking import BookingCreate, BookingCreatedResponse, BookingResponse
from app.schemas.pricing import PriceBreakdownView
from app.services.booking import service as booking_service

router = APIRouter(prefix="/bookings", tags=["bookings"])


@router.post("", response_model=BookingCreatedResponse, status_code=status.HTTP_201_CREATED)
def create_booking(
    payload: BookingCreate,
    db: Session = Depends(get_db),
) -> BookingCreatedResponse:
    """
    Rejections:
      400 NotBookable / OutsideAvailability / MissingParameter / Unavailable
      404 ItemNotFound
      409 SlotConflict (details.conflicting_booking)
      503 TransientStoreFailure, safe to retry
    """
    booking, price = booking_service.create_booking(db, payload)
    return BookingCreatedResponse(
        booking=BookingResponse.model_validate(booking),
        pricing=PriceBreakdownView.model_validate(price.pricing_breakdown),
    )


@router.get("/{booking_id}", response_model=BookingResponse)
def get_booking(booking_id: uuid.UUID, db: Session = Depends(get_db)) -> BookingResponse:
    return BookingResponse.model_validate(booking_service.get_booking(db, booking_id))


@router.patch("/{booking_id}/cancel", response_model=BookingResponse)
def cancel_booking(booking_id: uuid.UUID, db: Session = Depends(get_db)) -> BookingResponse:
    return BookingResponse.model_validate(booking_service.cancel_booking(db, booking_id))
