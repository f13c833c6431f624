"""Notification outbox model.

Rows are written by trigger rules and drained by an external delivery
collaborator (email/SMS); nothing in this package sends them.
"""

from __future__ import annotations

import uuid

from sqlalchemy import JSON, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, UUIDMixin, TimestampMixin, TenantMixin


class Notification(UUIDMixin, TimestampMixin, TenantMixin, Base):
    __tablename__ = "notifications"

    kind: Mapped[str] = mapped_column(String(50), index=True)
    subject_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, default=None)
    payload: Mapped[dict] = mapped_column(JSON, default=dict)
    status: Mapped[str] = mapped_column(String(20), default="pending")

    def __repr__(self) -> str:
        return f"<Notification {self.kind} {self.status}>"
