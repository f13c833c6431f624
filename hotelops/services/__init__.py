"""Entity services and their construction."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable

from ..config import HotelOpsSettings
from ..retry import RetryExecutor, RetryPolicy
from ..store.base import Store
from ..triggers.engine import utcnow
from .billing_svc import BillingService
from .guest_svc import GuestService
from .housekeeping_svc import HousekeepingService
from .property_svc import PropertyService
from .reservation_svc import ReservationService
from .resource import Page, ResourceService
from .room_svc import RoomService
from .staff_svc import StaffService


@dataclass
class HotelOpsServices:
    store: Store
    retry: RetryExecutor
    properties: PropertyService
    rooms: RoomService
    reservations: ReservationService
    billings: BillingService
    housekeeping: HousekeepingService
    guests: GuestService
    staff: StaffService

    def resources(self) -> dict[str, ResourceService]:
        """Tenant-scoped services keyed by their URL segment."""
        return {
            "rooms": self.rooms,
            "reservations": self.reservations,
            "billings": self.billings,
            "housekeeping": self.housekeeping,
            "guests": self.guests,
            "staff": self.staff,
        }


def build_services(
    settings: HotelOpsSettings,
    store: Store,
    retry: RetryExecutor | None = None,
    clock: Callable[[], datetime] = utcnow,
) -> HotelOpsServices:
    """Wire every entity service to one store and retry executor."""
    retry = retry or RetryExecutor(RetryPolicy.from_settings(settings))
    common = {"retry_reads": settings.retry_reads}
    return HotelOpsServices(
        store=store,
        retry=retry,
        properties=PropertyService(store, retry, **common),
        rooms=RoomService(store, retry, **common),
        reservations=ReservationService(store, retry, clock=clock, **common),
        billings=BillingService(store, retry, clock=clock, **common),
        housekeeping=HousekeepingService(
            store,
            retry,
            due_in=timedelta(hours=settings.housekeeping_due_hours),
            clock=clock,
            **common,
        ),
        guests=GuestService(store, retry, **common),
        staff=StaffService(store, retry, **common),
    )


__all__ = [
    "BillingService",
    "GuestService",
    "HotelOpsServices",
    "HousekeepingService",
    "Page",
    "PropertyService",
    "ReservationService",
    "ResourceService",
    "RoomService",
    "StaffService",
    "build_services",
]
