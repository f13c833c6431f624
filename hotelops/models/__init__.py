"""Hotel operations models - re-exports all models and Base.metadata."""

from .base import Base, UUIDMixin, TimestampMixin, TenantMixin
from .property import Property
from .room import Room
from .guest import Guest
from .staff import Staff
from .reservation import Reservation, ReservationRoom
from .billing import Billing, Revenue
from .housekeeping import HousekeepingRequest
from .notification import Notification

__all__ = [
    "Base",
    "UUIDMixin",
    "TimestampMixin",
    "TenantMixin",
    "Property",
    "Room",
    "Guest",
    "Staff",
    "Reservation",
    "ReservationRoom",
    "Billing",
    "Revenue",
    "HousekeepingRequest",
    "Notification",
]
