"""Billing schemas."""

from __future__ import annotations

import uuid
from datetime import date
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, Field

BillingStatus = Literal[
    "draft", "pending", "paid", "partially_paid", "overdue", "cancelled", "refunded",
]


class BillingCreate(BaseModel):
    property_id: uuid.UUID
    reservation_id: uuid.UUID | None = None
    guest_id: uuid.UUID | None = None
    invoice_number: str | None = None
    billing_date: date | None = None
    due_date: date | None = None
    amount: Decimal = Field(ge=0)
    currency: str = Field(default="USD", min_length=3, max_length=3)
    tax_amount: Decimal = Field(default=Decimal("0"), ge=0)
    tax_rate: Decimal = Field(default=Decimal("0"), ge=0)
    category: str = "room"
    description: str | None = None
    status: BillingStatus = "draft"
    payment_method: str | None = None
    payment_reference: str | None = None
    payment_date: date | None = None


class BillingUpdate(BaseModel):
    due_date: date | None = None
    amount: Decimal | None = Field(default=None, ge=0)
    currency: str | None = Field(default=None, min_length=3, max_length=3)
    tax_amount: Decimal | None = Field(default=None, ge=0)
    tax_rate: Decimal | None = Field(default=None, ge=0)
    category: str | None = None
    description: str | None = None
    status: BillingStatus | None = None
    payment_method: str | None = None
    payment_reference: str | None = None
    payment_date: date | None = None
