"""Billing and revenue models.

Revenue rows are a one-way mirror of billings maintained by the
billing_to_revenue trigger rule; never write them directly.
"""

from __future__ import annotations

import uuid
from datetime import date
from decimal import Decimal

from sqlalchemy import Date, ForeignKey, Numeric, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, Money, UUIDMixin, TimestampMixin, TenantMixin

BILLING_STATUSES = (
    "draft", "pending", "paid", "partially_paid", "overdue", "cancelled", "refunded",
)


class Billing(UUIDMixin, TimestampMixin, TenantMixin, Base):
    __tablename__ = "billings"

    reservation_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("reservations.id", ondelete="SET NULL"), default=None, index=True
    )
    guest_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("guests.id", ondelete="SET NULL"), default=None
    )
    invoice_number: Mapped[str] = mapped_column(String(40), unique=True)
    billing_date: Mapped[date] = mapped_column(Date)
    due_date: Mapped[date | None] = mapped_column(Date, default=None)
    amount: Mapped[Decimal] = mapped_column(Money)
    currency: Mapped[str] = mapped_column(String(3), default="USD")
    tax_amount: Mapped[Decimal] = mapped_column(Money, default=0)
    tax_rate: Mapped[Decimal] = mapped_column(Numeric(5, 2), default=0)
    category: Mapped[str] = mapped_column(String(50), default="room")
    description: Mapped[str | None] = mapped_column(Text, default=None)
    status: Mapped[str] = mapped_column(String(20), default="draft", index=True)
    payment_method: Mapped[str | None] = mapped_column(String(30), default=None)
    payment_reference: Mapped[str | None] = mapped_column(String(100), default=None)
    payment_date: Mapped[date | None] = mapped_column(Date, default=None)

    def __repr__(self) -> str:
        return f"<Billing {self.invoice_number!r} {self.status}>"


class Revenue(UUIDMixin, TimestampMixin, TenantMixin, Base):
    __tablename__ = "revenues"

    billing_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("billings.id", ondelete="CASCADE"), unique=True
    )
    amount: Mapped[Decimal] = mapped_column(Money)
    currency: Mapped[str] = mapped_column(String(3), default="USD")
    category: Mapped[str] = mapped_column(String(50))
    description: Mapped[str | None] = mapped_column(Text, default=None)
    status: Mapped[str] = mapped_column(String(20))

    def __repr__(self) -> str:
        return f"<Revenue billing={self.billing_id} {self.amount}>"
