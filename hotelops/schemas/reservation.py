"""Reservation schemas."""

from __future__ import annotations

import uuid
from datetime import date
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, Field, model_validator

ReservationStatus = Literal[
    "pending", "confirmed", "booked", "checked_in", "checked_out", "cancelled", "no_show",
]
PaymentStatus = Literal["pending", "authorized", "paid", "partially_paid", "refunded", "failed"]


class ReservationCreate(BaseModel):
    property_id: uuid.UUID
    guest_id: uuid.UUID | None = None
    booking_number: str | None = None
    confirmation_code: str | None = None
    check_in_date: date
    check_out_date: date
    adults: int = Field(default=1, ge=1)
    children: int = Field(default=0, ge=0)
    status: ReservationStatus = "pending"
    payment_status: PaymentStatus = "pending"
    source: str = "direct"
    total_amount: Decimal = Field(default=Decimal("0"), ge=0)
    currency: str = Field(default="USD", min_length=3, max_length=3)
    special_requests: str | None = None

    @model_validator(mode="after")
    def _check_dates(self):
        if self.check_out_date <= self.check_in_date:
            raise ValueError("check_out_date must be after check_in_date")
        return self


class ReservationUpdate(BaseModel):
    guest_id: uuid.UUID | None = None
    check_in_date: date | None = None
    check_out_date: date | None = None
    adults: int | None = Field(default=None, ge=1)
    children: int | None = Field(default=None, ge=0)
    status: ReservationStatus | None = None
    payment_status: PaymentStatus | None = None
    source: str | None = None
    total_amount: Decimal | None = Field(default=None, ge=0)
    currency: str | None = Field(default=None, min_length=3, max_length=3)
    special_requests: str | None = None


class ReservationRoomCreate(BaseModel):
    room_id: uuid.UUID | None = None
    rate_amount: Decimal = Field(default=Decimal("0"), ge=0)
    quantity: int = Field(default=1, ge=1)
