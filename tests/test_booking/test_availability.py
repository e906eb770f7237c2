"""
Availability calculator tests.
"""

import uuid

import pytest
from datetime import time
from types import SimpleNamespace

from conftest import next_weekday

from app.models.booking import Booking, BookingStatus
from app.services.booking.availability import (
    get_available_slots,
    slots_for,
    validate_item_availability,
)
from app.services.errors import (
    InvalidConfiguration,
    ItemNotFound,
    NotBookable,
    OutsideAvailability,
)
from app.services.timeslots import parse_hhmm

WEEKDAYS_ONLY = {
    "days": ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday"],
    "time_slots": [
        {"start": "09:00", "end": "12:00"},
        {"start": "13:00", "end": "18:00"},
    ],
}


def _item(availability_config=WEEKDAYS_ONLY, is_bookable=True):
    return SimpleNamespace(
        id=uuid.uuid4(), is_bookable=is_bookable, availability_config=availability_config
    )


def _check(item, day, start, end):
    validate_item_availability(item, day, parse_hhmm(start), parse_hhmm(end))


class TestValidateItemAvailability:
    @pytest.mark.parametrize(
        "start,end", [("09:00", "10:00"), ("09:00", "12:00"), ("13:00", "18:00")]
    )
    def test_inside_a_window(self, start, end):
        _check(_item(), next_weekday(0), start, end)

    @pytest.mark.parametrize(
        "start,end",
        [("08:30", "09:30"), ("11:30", "13:30"), ("17:00", "18:30"), ("12:00", "13:00")],
    )
    def test_outside_every_window(self, start, end):
        with pytest.raises(OutsideAvailability):
            _check(_item(), next_weekday(0), start, end)

    def test_closed_day(self):
        with pytest.raises(OutsideAvailability) as exc_info:
            _check(_item(), next_weekday(5), "10:00", "11:00")
        assert exc_info.value.details == {"day": "Saturday"}

    def test_not_bookable(self):
        with pytest.raises(NotBookable):
            _check(_item(is_bookable=False), next_weekday(0), "10:00", "11:00")

    def test_no_config_means_no_restrictions(self):
        _check(_item(availability_config=None), next_weekday(6), "06:00", "23:00")

    def test_days_only_config_allows_any_time(self):
        _check(_item({"days": ["Sunday"]}), next_weekday(6), "06:00", "23:00")

    def test_malformed_config(self):
        with pytest.raises(InvalidConfiguration):
            _check(_item({"days": ["Funday"]}), next_weekday(0), "10:00", "11:00")


class TestSlotsFor:
    def test_open_day_lists_windows(self):
        schedule = slots_for(_item(), next_weekday(1), [])
        assert schedule.available is True
        assert schedule.day == "Tuesday"
        assert [w.label for w in schedule.windows] == ["09:00-12:00", "13:00-18:00"]

    def test_closed_day_has_no_windows(self):
        schedule = slots_for(_item(), next_weekday(6), [])
        assert schedule.available is False
        assert schedule.windows == []
        assert schedule.message == "Item not available on Sunday"

    def test_default_window_when_no_slots_configured(self):
        schedule = slots_for(_item(availability_config=None), next_weekday(6), [])
        assert schedule.available is True
        assert [w.label for w in schedule.windows] == ["09:00-18:00"]

    def test_not_bookable(self):
        with pytest.raises(NotBookable):
            slots_for(_item(is_bookable=False), next_weekday(0), [])


class TestGetAvailableSlots:
    def test_lists_active_bookings_only(self, db, conference_room, booking_date):
        def book(start, end, status):
            db.add(
                Booking(
                    item_id=conference_room.id,
                    booking_date=booking_date,
                    start_time=start,
                    end_time=end,
                    customer_name="Ada",
                    base_price=0,
                    grand_total=0,
                    status=status,
                )
            )

        book(time(14, 0), time(15, 0), BookingStatus.CONFIRMED)
        book(time(10, 0), time(11, 0), BookingStatus.PENDING)
        book(time(12, 0), time(13, 0), BookingStatus.CANCELLED)
        db.commit()

        schedule = get_available_slots(db, conference_room.id, booking_date)
        assert [(b.start_time, b.end_time) for b in schedule.booked] == [
            ("10:00", "11:00"),
            ("14:00", "15:00"),
        ]

    def test_unknown_item(self, db):
        with pytest.raises(ItemNotFound):
            get_available_slots(db, uuid.uuid4(), next_weekday(0))

    def test_non_bookable_item(self, db, cappuccino):
        with pytest.raises(NotBookable):
            get_available_slots(db, cappuccino.id, next_weekday(0))
