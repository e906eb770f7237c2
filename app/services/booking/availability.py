"""
Availability Calculator.

Answers two questions from an item's availability_config:
  - which time windows does the item offer on a given date?  (slots_for)
  - may this [start, end) range be booked on that date?      (validate_item_availability)

availability_config = {"days": [...weekday names...], "time_slots": [{"start", "end"}, ...]}
  days missing       → open every day
  time_slots missing → default window (settings.default_open_time–default_close_time)
  config missing     → no restrictions when validating a booking
"""

import uuid
from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from pydantic import ValidationError
from sqlalchemy.orm import Session

from app.models.booking import Booking
from app.models.catalog import Item
from app.repositories.bookings import BookingStore
from app.repositories.catalog import CatalogStore
from app.schemas.config import AvailabilityConfig, TimeSlot
from app.services.errors import (
    InvalidConfiguration,
    ItemNotFound,
    NotBookable,
    OutsideAvailability,
)
from app.services.timeslots import format_minutes, weekday_name
from app.settings import settings


@dataclass
class BookedRange:
    booking_id: uuid.UUID
    start_time: str
    end_time: str


@dataclass
class DaySchedule:
    date: date
    day: str
    available: bool
    windows: list[TimeSlot] = field(default_factory=list)
    booked: list[BookedRange] = field(default_factory=list)
    message: Optional[str] = None


def default_window() -> TimeSlot:
    return TimeSlot(start=settings.default_open_time, end=settings.default_close_time)


def load_availability(item: Item) -> Optional[AvailabilityConfig]:
    if item.availability_config is None:
        return None
    try:
        return AvailabilityConfig.model_validate(item.availability_config)
    except ValidationError as exc:
        errors = exc.errors(include_url=False, include_context=False, include_input=False)
        raise InvalidConfiguration(
            "Invalid availability configuration",
            {"item_id": str(item.id), "errors": errors},
        )


def validate_item_availability(
    item: Item, booking_date: date, start: int, end: int
) -> None:
    """
    Raise unless [start, end) (minutes since midnight) is bookable on booking_date.

    Raises:
        NotBookable:          item.is_bookable is false
        OutsideAvailability:  weekday not offered, or range not inside any window
    """
    if not item.is_bookable:
        raise NotBookable(item.id)

    config = load_availability(item)
    if config is None:
        return

    day = weekday_name(booking_date)
    if config.days is not None and day not in config.days:
        raise OutsideAvailability(f"Item not available on {day}", {"day": day})

    if config.time_slots is not None:
        inside = any(
            slot.start_minutes <= start and end <= slot.end_minutes
            for slot in config.time_slots
        )
        if not inside:
            raise OutsideAvailability(
                f"Requested time {format_minutes(start)}-{format_minutes(end)} "
                f"is outside available slots",
                {"time_slots": [slot.label for slot in config.time_slots]},
            )


def slots_for(item: Item, booking_date: date, bookings: list[Booking]) -> DaySchedule:
    """Allowed windows for the date plus the ranges already taken."""
    if not item.is_bookable:
        raise NotBookable(item.id)

    config = load_availability(item)
    day = weekday_name(booking_date)

    if config is not None and config.days is not None and day not in config.days:
        return DaySchedule(
            date=booking_date,
            day=day,
            available=False,
            message=f"Item not available on {day}",
        )

    if config is not None and config.time_slots is not None:
        windows = list(config.time_slots)
    else:
        windows = [default_window()]

    return DaySchedule(
        date=booking_date,
        day=day,
        available=True,
        windows=windows,
        booked=[
            BookedRange(
                booking_id=b.id,
                start_time=b.start_time.strftime("%H:%M"),
                end_time=b.end_time.strftime("%H:%M"),
            )
            for b in bookings
        ],
    )


def get_available_slots(db: Session, item_id: uuid.UUID, booking_date: date) -> DaySchedule:
    item = CatalogStore(db).get_item_with_ancestors(item_id)
    if item is None:
        raise ItemNotFound(item_id)
    bookings = BookingStore(db).list_active_bookings(item.id, booking_date)
    return slots_for(item, booking_date, bookings)
