"""Reservation service - bookings, room lines, arrivals and statistics."""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Callable, Iterable, Mapping

from ..errors import NoDataReturned, RowNotFound
from ..query.filters import FilterCondition
from ..retry import RetryExecutor
from ..schemas.reservation import ReservationCreate, ReservationRoomCreate, ReservationUpdate
from ..store.base import Row, Store
from ..triggers.engine import utcnow
from .resource import ResourceService, validate_payload

logger = logging.getLogger(__name__)


class ReservationService(ResourceService):
    def __init__(
        self,
        store: Store,
        retry: RetryExecutor,
        *,
        clock: Callable[[], datetime] = utcnow,
        **kwargs,
    ):
        super().__init__(
            store,
            "reservations",
            retry,
            create_schema=ReservationCreate,
            update_schema=ReservationUpdate,
            search_fields=("booking_number", "confirmation_code"),
            date_range_fields=("check_in_date", "check_out_date"),
            references={"guest_id": "guests"},
            **kwargs,
        )
        self.clock = clock
        self.room_lines = ResourceService(
            store,
            "reservation_rooms",
            retry,
            create_schema=ReservationRoomCreate,
            default_order=(("created_at", True),),
            retry_reads=self.retry_reads,
        )

    def today(self) -> date:
        return self.clock().date()

    async def create(self, payload: Mapping[str, Any]) -> Row:
        return await self.create_with_rooms(payload, ())

    async def create_with_rooms(
        self,
        reservation: Mapping[str, Any],
        rooms: Iterable[Mapping[str, Any]],
    ) -> Row:
        """Create a reservation and its room lines in one store transaction.

        The store fills in the booking number and confirmation code when
        they are not supplied.
        """
        data = validate_payload(self.create_schema, reservation)
        lines = [validate_payload(ReservationRoomCreate, line) for line in rooms]
        await self.check_references(data["property_id"], data)
        for line in lines:
            if line.get("room_id") is not None:
                await self.check_reference(data["property_id"], "rooms", line["room_id"], "room_id")
        created = await self.rpc(
            "create_reservation", {"reservation_data": data, "room_data": lines}
        )
        if not created:
            raise NoDataReturned(self.table)
        return created

    async def get_by_confirmation_code(self, code: str) -> Row | None:
        return await self.get_one({"confirmation_code": code})

    async def get_by_guest_id(self, guest_id: Any, page: int = 1, limit: int = 20):
        return await self.list({"guest_id": guest_id}, page, limit)

    async def update_status(self, reservation_id: Any, status: str) -> Row:
        return await self.update_by_id(reservation_id, {"status": status})

    async def update_payment_status(self, reservation_id: Any, payment_status: str) -> Row:
        return await self.update_by_id(reservation_id, {"payment_status": payment_status})

    async def assign_room(self, reservation_id: Any, line_id: Any, room_id: Any) -> Row:
        """Point one of the reservation's room lines at a concrete room."""
        reservation = await self.get_by_id(reservation_id)
        if reservation is None:
            raise RowNotFound(self.table, reservation_id)
        await self.check_reference(reservation["property_id"], "rooms", room_id, "room_id")
        conditions = [
            FilterCondition("id", "eq", line_id),
            FilterCondition("reservation_id", "eq", reservation_id),
        ]
        rows = await self._write(
            lambda: self.store.update("reservation_rooms", conditions, {"room_id": room_id})
        )
        if not rows:
            raise RowNotFound("reservation_rooms", line_id)
        return rows[0]

    async def get_rooms(self, reservation_id: Any) -> list[Row]:
        return await self.room_lines.find({"reservation_id": reservation_id})

    async def get_today_arrivals(self, property_id: Any) -> list[Row]:
        return await self.find(
            {
                "property_id": property_id,
                "check_in_date": self.today(),
                "status": ["confirmed", "booked"],
            },
            order=(("check_in_date", True),),
        )

    async def get_today_departures(self, property_id: Any) -> list[Row]:
        return await self.find(
            {
                "property_id": property_id,
                "check_out_date": self.today(),
                "status": "checked_in",
            },
            order=(("check_out_date", True),),
        )

    async def get_statistics(
        self, property_id: Any, start_date: date | str, end_date: date | str
    ) -> dict[str, Any]:
        return await self.rpc(
            "reservation_statistics",
            {"property_id": property_id, "start_date": start_date, "end_date": end_date},
        )
