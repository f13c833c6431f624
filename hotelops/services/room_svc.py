"""Room service - inventory and status changes."""

from __future__ import annotations

from typing import Any

from ..retry import RetryExecutor
from ..schemas.room import RoomCreate, RoomUpdate
from ..store.base import Row, Store
from .resource import ResourceService


class RoomService(ResourceService):
    def __init__(self, store: Store, retry: RetryExecutor, **kwargs):
        super().__init__(
            store,
            "rooms",
            retry,
            create_schema=RoomCreate,
            update_schema=RoomUpdate,
            search_fields=("number", "room_type"),
            default_order=(("number", True),),
            **kwargs,
        )

    async def set_status(self, room_id: Any, status: str) -> Row:
        return await self.update_by_id(room_id, {"status": status})

    async def mark_checkout(self, room_id: Any) -> Row:
        """Flag a room as just vacated; housekeeping is assigned by the store."""
        return await self.set_status(room_id, "checkout")

    async def list_available(self, property_id: Any) -> list[Row]:
        return await self.find({"property_id": property_id, "status": "available"})
