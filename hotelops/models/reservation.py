"""Reservation and reservation-room link models."""

from __future__ import annotations

import uuid
from datetime import date
from decimal import Decimal

from sqlalchemy import Date, ForeignKey, Integer, Numeric, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, Money, UUIDMixin, TimestampMixin, TenantMixin

RESERVATION_STATUSES = (
    "pending", "confirmed", "booked", "checked_in", "checked_out", "cancelled", "no_show",
)
PAYMENT_STATUSES = ("pending", "authorized", "paid", "partially_paid", "refunded", "failed")


class Reservation(UUIDMixin, TimestampMixin, TenantMixin, Base):
    __tablename__ = "reservations"

    guest_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("guests.id", ondelete="SET NULL"), default=None, index=True
    )
    booking_number: Mapped[str] = mapped_column(String(30), unique=True)
    confirmation_code: Mapped[str] = mapped_column(String(12), index=True)
    check_in_date: Mapped[date] = mapped_column(Date)
    check_out_date: Mapped[date] = mapped_column(Date)
    adults: Mapped[int] = mapped_column(Integer, default=1)
    children: Mapped[int] = mapped_column(Integer, default=0)
    status: Mapped[str] = mapped_column(String(20), default="pending", index=True)
    payment_status: Mapped[str] = mapped_column(String(20), default="pending")
    source: Mapped[str] = mapped_column(String(30), default="direct")
    total_amount: Mapped[Decimal] = mapped_column(Money, default=0)
    currency: Mapped[str] = mapped_column(String(3), default="USD")
    special_requests: Mapped[str | None] = mapped_column(Text, default=None)

    def __repr__(self) -> str:
        return f"<Reservation {self.booking_number!r} {self.status}>"


class ReservationRoom(UUIDMixin, TimestampMixin, Base):
    __tablename__ = "reservation_rooms"

    reservation_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("reservations.id", ondelete="CASCADE"), index=True
    )
    room_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("rooms.id", ondelete="SET NULL"), default=None, index=True
    )
    rate_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=0)
    quantity: Mapped[int] = mapped_column(Integer, default=1)

    def __repr__(self) -> str:
        return f"<ReservationRoom {self.reservation_id} -> {self.room_id}>"
