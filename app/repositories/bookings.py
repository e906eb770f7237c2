"""
Booking Store — persistence of bookings plus the lock scope used for admission.

Usage (read-check-write as one unit of work):
    store = BookingStore(db)
    with store.lock_scope(item_id, booking_date):
        existing = store.list_active_bookings(item_id, booking_date, for_update=True)
        ...
        store.insert(booking)
        db.commit()

The caller commits (or rolls back) inside the scope so the transaction is
finished before the next admission for the same key is let through.
"""

import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import date
from typing import Optional

from sqlalchemy import select, text
from sqlalchemy.orm import Session

from app.models.booking import Booking, BookingStatus
from app.repositories.locks import admission_mutex, advisory_key


class BookingStore:
    def __init__(self, db: Session):
        self.db = db

    @property
    def dialect(self) -> str:
        return self.db.get_bind().dialect.name

    @contextmanager
    def lock_scope(self, item_id: uuid.UUID, booking_date: date) -> Iterator[None]:
        """Serialize admissions for one (item, date); other keys run in parallel."""
        with admission_mutex.hold((item_id, booking_date)):
            if self.dialect == "postgresql":
                # Released automatically at commit/rollback
                self.db.execute(
                    text("SELECT pg_advisory_xact_lock(:key)"),
                    {"key": advisory_key(item_id, booking_date)},
                )
            yield

    def list_active_bookings(
        self, item_id: uuid.UUID, booking_date: date, for_update: bool = False
    ) -> list[Booking]:
        """Pending + confirmed bookings for the item on that date, earliest first."""
        stmt = (
            select(Booking)
            .where(
                Booking.item_id == item_id,
                Booking.booking_date == booking_date,
                Booking.status.in_(BookingStatus.ACTIVE),
            )
            .order_by(Booking.start_time.asc())
        )
        if for_update:
            stmt = stmt.with_for_update()
        return list(self.db.execute(stmt).scalars())

    def get_by_id(
        self, booking_id: uuid.UUID, for_update: bool = False
    ) -> Optional[Booking]:
        stmt = select(Booking).where(Booking.id == booking_id)
        if for_update:
            stmt = stmt.with_for_update()
        return self.db.execute(stmt).scalar_one_or_none()

    def insert(self, booking: Booking) -> Booking:
        self.db.add(booking)
        self.db.flush()
        return booking

    def update(self, booking: Booking) -> Booking:
        self.db.flush()
        return booking
