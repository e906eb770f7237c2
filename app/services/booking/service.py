"""
Booking Service — admission, cancellation and lookup.

Admission (create_booking) is one unit of work:
  1. Load the item (ItemNotFound / ItemInactive)
  2. Check the requested day + window against availability (NotBookable / OutsideAvailability)
  3. Price the booking (duration in hours, start time, selected addons)
  4. Under the (item, date) lock: load pending + confirmed bookings for the date
  5. Any half-open overlap → SlotConflict, nothing written
  6. Otherwise insert (status = confirmed) and commit before the lock is released

Store/connection failures roll the unit of work back and surface as
TransientStoreFailure, never as a conflict or a success.
"""

import logging
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from decimal import Decimal
from typing import Optional

from sqlalchemy.orm import Session

from app.database import STORE_ERRORS, is_transient_store_error
from app.models.booking import Booking, BookingStatus
from app.repositories.bookings import BookingStore
from app.repositories.catalog import CatalogStore
from app.schemas.booking import BookingCreate
from app.services.booking.availability import validate_item_availability
from app.services.errors import (
    AlreadyCancelled,
    BookingNotFound,
    InvalidTransition,
    ItemInactive,
    ItemNotFound,
    SlotConflict,
    TransientStoreFailure,
)
from app.services.pricing.breakdown import PriceBreakdownBuilder, PriceResult
from app.services.pricing.strategies import PricingParams
from app.services.timeslots import from_minutes, to_minutes, times_overlap

logger = logging.getLogger(__name__)


@contextmanager
def _unit_of_work(db: Session, action: str) -> Iterator[None]:
    """Roll back on any failure; transient store errors become TransientStoreFailure."""
    try:
        yield
    except STORE_ERRORS as exc:
        db.rollback()
        if not is_transient_store_error(exc):
            raise
        logger.warning("%s failed in store: %s", action, exc)
        raise TransientStoreFailure("Booking store unavailable, please retry") from exc
    except Exception:
        db.rollback()
        raise


def find_conflict(start: int, end: int, existing: list[Booking]) -> Optional[Booking]:
    """First existing booking whose range overlaps [start, end), if any."""
    for booking in existing:
        booked_start, booked_end = to_minutes(booking.start_time), to_minutes(booking.end_time)
        if times_overlap(start, end, booked_start, booked_end):
            return booking
    return None


def create_booking(db: Session, payload: BookingCreate) -> tuple[Booking, PriceResult]:
    """
    Admit a booking if its slot is free. Returns the persisted booking and the
    price breakdown whose totals were snapshotted onto it.
    """
    catalog = CatalogStore(db)
    store = BookingStore(db)

    with _unit_of_work(db, f"Booking admission for item {payload.item_id}"):
        item = catalog.get_item_with_ancestors(payload.item_id)
        if item is None:
            raise ItemNotFound(payload.item_id)
        if not item.is_active:
            raise ItemInactive(item.id)

        start, end = payload.start_minutes, payload.end_minutes
        validate_item_availability(item, payload.booking_date, start, end)

        price = PriceBreakdownBuilder(catalog).build_for_item(
            item,
            PricingParams(
                duration=Decimal(end - start) / 60,
                time=payload.start_time,
                addons=payload.addons,
            ),
        )
        breakdown = price.pricing_breakdown

        # Taking the lock can itself time out, so it sits inside the unit of work
        with store.lock_scope(item.id, payload.booking_date):
            existing = store.list_active_bookings(
                item.id, payload.booking_date, for_update=True
            )
            conflict = find_conflict(start, end, existing)
            if conflict is not None:
                logger.info(
                    "Booking rejected: item %s %s %s-%s overlaps booking %s",
                    item.id,
                    payload.booking_date,
                    payload.start_time,
                    payload.end_time,
                    conflict.id,
                )
                raise SlotConflict(
                    "Time slot already booked",
                    {
                        "conflicting_booking": {
                            "id": str(conflict.id),
                            "start_time": conflict.start_time.strftime("%H:%M"),
                            "end_time": conflict.end_time.strftime("%H:%M"),
                        }
                    },
                )

            booking = store.insert(
                Booking(
                    item_id=item.id,
                    booking_date=payload.booking_date,
                    start_time=from_minutes(start),
                    end_time=from_minutes(end),
                    customer_name=payload.customer_name,
                    customer_email=payload.customer_email,
                    customer_phone=payload.customer_phone,
                    notes=payload.notes,
                    base_price=breakdown.base_price,
                    addons_total=breakdown.addons_total,
                    tax_amount=breakdown.tax.amount,
                    grand_total=breakdown.grand_total,
                    status=BookingStatus.CONFIRMED,
                )
            )
            db.commit()

    logger.info(
        "Booking %s created for item %s on %s %s-%s",
        booking.id,
        item.id,
        booking.booking_date,
        payload.start_time,
        payload.end_time,
    )
    return booking, price


def get_booking(db: Session, booking_id: uuid.UUID) -> Booking:
    booking = BookingStore(db).get_by_id(booking_id)
    if booking is None:
        raise BookingNotFound(booking_id)
    return booking


def cancel_booking(db: Session, booking_id: uuid.UUID) -> Booking:
    """
    pending / confirmed → cancelled. Cancelling twice is an error, not a no-op.
    Completed bookings cannot be cancelled.
    """
    store = BookingStore(db)
    with _unit_of_work(db, f"Cancellation of booking {booking_id}"):
        booking = store.get_by_id(booking_id, for_update=True)
        if booking is None:
            raise BookingNotFound(booking_id)
        if booking.status == BookingStatus.CANCELLED:
            raise AlreadyCancelled(booking_id)
        if booking.status not in BookingStatus.ACTIVE:
            raise InvalidTransition(
                f"Cannot cancel booking in status '{booking.status}'",
                {"booking_id": str(booking_id), "status": booking.status},
            )

        booking.status = BookingStatus.CANCELLED
        store.update(booking)
        db.commit()

    logger.info("Booking %s cancelled", booking.id)
    return booking
