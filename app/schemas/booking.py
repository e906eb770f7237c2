"""
Booking request and response shapes.

Times cross the API as "HH:MM" 24-hour strings; dates as YYYY-MM-DD with no
timezone. Shape problems (bad format, end before start, past date) are
rejected here with a 422 before the booking service runs.
"""

import re
import uuid
from datetime import date, time
from decimal import Decimal
from typing import Optional

from pydantic import EmailStr, Field, field_validator, model_validator

from app.schemas.common import BaseSchema, TimestampedSchema
from app.schemas.pricing import PriceBreakdownView
from app.services.timeslots import format_minutes, parse_hhmm

_PHONE = re.compile(r"^[0-9]{10,15}$")


def _hhmm(value) -> str:
    if isinstance(value, time):
        return value.strftime("%H:%M")
    return value


class BookingCreate(BaseSchema):
    item_id: uuid.UUID
    booking_date: date
    start_time: str
    end_time: str
    customer_name: str = Field(..., min_length=2, max_length=255)
    customer_email: Optional[EmailStr] = None
    customer_phone: Optional[str] = None
    addons: list[uuid.UUID] = Field(default_factory=list)
    notes: Optional[str] = None

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_time(cls, v: str) -> str:
        return format_minutes(parse_hhmm(v))

    @field_validator("customer_email", "customer_phone", "notes", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("customer_phone")
    @classmethod
    def validate_phone(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not _PHONE.match(v):
            raise ValueError("Phone number must be 10-15 digits")
        return v

    @field_validator("booking_date")
    @classmethod
    def validate_not_past(cls, v: date) -> date:
        if v < date.today():
            raise ValueError("Booking date cannot be in the past")
        return v

    @model_validator(mode="after")
    def validate_time_order(self):
        if parse_hhmm(self.end_time) <= parse_hhmm(self.start_time):
            raise ValueError("End time must be after start time")
        return self

    @property
    def start_minutes(self) -> int:
        return parse_hhmm(self.start_time)

    @property
    def end_minutes(self) -> int:
        return parse_hhmm(self.end_time)


class BookingResponse(TimestampedSchema):
    item_id: uuid.UUID
    booking_date: date
    start_time: str
    end_time: str
    customer_name: str
    customer_email: Optional[str]
    customer_phone: Optional[str]
    base_price: Decimal
    addons_total: Decimal
    tax_amount: Decimal
    grand_total: Decimal
    status: str
    notes: Optional[str]

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def format_time(cls, v) -> str:
        return _hhmm(v)


class BookingCreatedResponse(BaseSchema):
    booking: BookingResponse
    pricing: PriceBreakdownView
    message: str = "Booking created successfully"


# ── Availability ─────────────────────────────────────────────────────────────


class TimeWindowView(BaseSchema):
    start: str
    end: str


class BookedRangeView(BaseSchema):
    booking_id: uuid.UUID
    start_time: str
    end_time: str


class AvailableSlotsResponse(BaseSchema):
    date: date
    day: str
    available: bool
    windows: list[TimeWindowView] = []
    booked: list[BookedRangeView] = []
    message: Optional[str] = None
