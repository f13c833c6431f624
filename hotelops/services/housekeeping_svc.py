"""Housekeeping service - requests, lifecycle, overdue lists."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any, Callable, Mapping

from ..errors import RowNotFound
from ..query.coerce import as_utc
from ..retry import RetryExecutor
from ..schemas.housekeeping import HousekeepingCreate, HousekeepingUpdate
from ..store.base import Row, Store
from ..triggers.engine import utcnow
from .resource import ResourceService, validate_payload

DEFAULT_DUE = timedelta(hours=3)


class HousekeepingService(ResourceService):
    def __init__(
        self,
        store: Store,
        retry: RetryExecutor,
        *,
        due_in: timedelta = DEFAULT_DUE,
        clock: Callable[[], datetime] = utcnow,
        **kwargs,
    ):
        super().__init__(
            store,
            "housekeeping_requests",
            retry,
            create_schema=HousekeepingCreate,
            update_schema=HousekeepingUpdate,
            search_fields=("notes", "issue_type"),
            date_range_fields=("due_by", "requested_at", "completed_at"),
            references={"room_id": "rooms", "assigned_to": "staff"},
            **kwargs,
        )
        self.due_in = due_in
        self.clock = clock

    async def create(self, payload: Mapping[str, Any]) -> Row:
        data = validate_payload(self.create_schema, payload)
        await self.check_references(data["property_id"], data)
        now = self.clock()
        data.setdefault("requested_at", now)
        data.setdefault("due_by", now + self.due_in)
        return await self._insert(data)

    async def assign(self, request_id: Any, staff_id: Any) -> Row:
        return await self.update_by_id(request_id, {"assigned_to": staff_id})

    async def start(self, request_id: Any) -> Row:
        return await self.update_by_id(
            request_id, {"status": "in_progress", "started_at": self.clock()}
        )

    async def complete(self, request_id: Any, notes: str | None = None) -> Row:
        """Close a request and record how long the work took."""
        request = await self.get_by_id(request_id)
        if request is None:
            raise RowNotFound(self.table, request_id)

        now = self.clock()
        payload: dict[str, Any] = {"status": "completed", "completed_at": now}
        started = as_utc(request.get("started_at"))
        if started is not None:
            payload["duration_minutes"] = max(int((now - started).total_seconds() // 60), 0)
        if notes:
            payload["notes"] = notes
        return await self.update_by_id(request_id, payload)

    async def cancel(self, request_id: Any, notes: str | None = None) -> Row:
        payload: dict[str, Any] = {"status": "cancelled"}
        if notes:
            payload["notes"] = notes
        return await self.update_by_id(request_id, payload)

    async def list_overdue(self, property_id: Any) -> list[Row]:
        """Pending requests past their due time, whether or not swept yet."""
        return await self.find(
            {
                "property_id": property_id,
                "status": ["pending", "overdue"],
                "due_by_lt": self.clock(),
            },
            order=(("due_by", True),),
        )

    async def list_for_staff(self, staff_id: Any, status: str | None = None) -> list[Row]:
        return await self.find(
            {"assigned_to": staff_id, "status": status}, order=(("due_by", True),)
        )

    async def list_for_room(self, room_id: Any, limit: int = 10) -> list[Row]:
        return (await self.list({"room_id": room_id}, page=1, limit=limit)).rows
