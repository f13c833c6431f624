"""Staff service."""

from __future__ import annotations

from typing import Any

from ..retry import RetryExecutor
from ..schemas.staff import StaffCreate, StaffUpdate
from ..store.base import Row, Store
from .resource import ResourceService


class StaffService(ResourceService):
    def __init__(self, store: Store, retry: RetryExecutor, **kwargs):
        super().__init__(
            store,
            "staff",
            retry,
            create_schema=StaffCreate,
            update_schema=StaffUpdate,
            search_fields=("first_name", "last_name", "email"),
            **kwargs,
        )

    async def list_active_housekeepers(self, property_id: Any) -> list[Row]:
        """Housekeeping staff eligible for auto-assignment, oldest first."""
        return await self.find(
            {"property_id": property_id, "role": "housekeeping", "is_active": True},
            order=(("created_at", True), ("id", True)),
        )
