"""
Booking — a time-slot reservation against a bookable Item.

The money columns are a snapshot of the price breakdown taken at admission
time; they are never recomputed afterwards.
"""

import uuid
from datetime import date, time
from decimal import Decimal
from typing import TYPE_CHECKING, Optional

from sqlalchemy import (
    CheckConstraint,
    Date,
    ForeignKey,
    Index,
    Numeric,
    String,
    Text,
    Time,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin

if TYPE_CHECKING:
    from app.models.catalog import Item


# ── Lifecycle state constants ────────────────────────────────────────────────


class BookingStatus:
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"

    ALL = [PENDING, CONFIRMED, CANCELLED, COMPLETED]
    # Statuses that occupy their slot
    ACTIVE = [PENDING, CONFIRMED]


# ── Model ────────────────────────────────────────────────────────────────────


class Booking(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    __tablename__ = "bookings"
    __table_args__ = (
        CheckConstraint("end_time > start_time", name="ck_booking_time_order"),
        Index("ix_bookings_item_date_start", "item_id", "booking_date", "start_time"),
    )

    item_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("items.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )

    booking_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    start_time: Mapped[time] = mapped_column(Time, nullable=False)
    end_time: Mapped[time] = mapped_column(Time, nullable=False)

    customer_name: Mapped[str] = mapped_column(String(255), nullable=False)
    customer_email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    customer_phone: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)

    # ── Price snapshot (DECIMAL for financial precision, never float) ───────
    base_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    addons_total: Mapped[Decimal] = mapped_column(
        Numeric(10, 2), nullable=False, default=Decimal("0")
    )
    tax_amount: Mapped[Decimal] = mapped_column(
        Numeric(10, 2), nullable=False, default=Decimal("0")
    )
    grand_total: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    status: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        default=BookingStatus.CONFIRMED,
        index=True,
        comment="pending | confirmed | cancelled | completed",
    )
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    item: Mapped["Item"] = relationship("Item", back_populates="bookings")

    def __repr__(self) -> str:
        return (
            f"<Booking item={self.item_id} date={self.booking_date} "
            f"{self.start_time:%H:%M}-{self.end_time:%H:%M} status={self.status!r}>"
        )
