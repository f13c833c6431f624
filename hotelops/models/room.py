"""Room model."""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy import Integer, Numeric, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, UUIDMixin, TimestampMixin, TenantMixin

# "checkout" is transient: it marks a vacated room and starts housekeeping.
ROOM_STATUSES = ("available", "occupied", "maintenance", "cleaning", "reserved", "checkout")


class Room(UUIDMixin, TimestampMixin, TenantMixin, Base):
    __tablename__ = "rooms"
    __table_args__ = (UniqueConstraint("property_id", "number", name="uq_room_number"),)

    number: Mapped[str] = mapped_column(String(20))
    floor: Mapped[int | None] = mapped_column(Integer, default=None)
    room_type: Mapped[str | None] = mapped_column(String(50), default=None)
    status: Mapped[str] = mapped_column(String(20), default="available", index=True)
    base_rate: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), default=None)
    max_occupancy: Mapped[int] = mapped_column(Integer, default=2)

    def __repr__(self) -> str:
        return f"<Room {self.number!r} {self.status}>"
