"""Housekeeping request model."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, UUIDMixin, TimestampMixin, TenantMixin

HOUSEKEEPING_STATUSES = ("pending", "in_progress", "completed", "cancelled", "overdue")
HOUSEKEEPING_PRIORITIES = ("low", "medium", "high", "urgent")
# Requests counted against a housekeeper's current load.
OPEN_STATUSES = ("pending", "in_progress")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class HousekeepingRequest(UUIDMixin, TimestampMixin, TenantMixin, Base):
    __tablename__ = "housekeeping_requests"

    room_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("rooms.id", ondelete="CASCADE"), index=True
    )
    status: Mapped[str] = mapped_column(String(20), default="pending", index=True)
    priority: Mapped[str] = mapped_column(String(10), default="medium")
    requested_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    due_by: Mapped[datetime] = mapped_column(DateTime(timezone=True), index=True)
    started_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), default=None)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), default=None)
    assigned_to: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("staff.id", ondelete="SET NULL"), default=None, index=True
    )
    notes: Mapped[str | None] = mapped_column(Text, default=None)
    issue_type: Mapped[str | None] = mapped_column(String(50), default=None)
    reported_by: Mapped[str | None] = mapped_column(String(100), default=None)
    is_recurring: Mapped[bool] = mapped_column(Boolean, default=False)
    recurrence_pattern: Mapped[str | None] = mapped_column(String(50), default=None)
    duration_minutes: Mapped[int | None] = mapped_column(Integer, default=None)

    def __repr__(self) -> str:
        return f"<HousekeepingRequest room={self.room_id} {self.status}>"
