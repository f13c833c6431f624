"""Billing service - invoices and payments.

Revenue rows are maintained by the store from billing writes.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Callable, Mapping

from ..retry import RetryExecutor
from ..schemas.billing import BillingCreate, BillingUpdate
from ..store.base import Row, Store
from ..triggers.engine import utcnow
from .resource import ResourceService, validate_payload


class BillingService(ResourceService):
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
            "billings",
            retry,
            create_schema=BillingCreate,
            update_schema=BillingUpdate,
            search_fields=("invoice_number", "description"),
            date_range_fields=("billing_date", "due_date"),
            references={"reservation_id": "reservations", "guest_id": "guests"},
            **kwargs,
        )
        self.clock = clock

    async def create(self, payload: Mapping[str, Any]) -> Row:
        data = validate_payload(self.create_schema, payload)
        await self.check_references(data["property_id"], data)
        if not data.get("invoice_number"):
            data["invoice_number"] = await self.rpc(
                "generate_invoice_number", {"property_id": data["property_id"]}
            )
        data.setdefault("billing_date", self.clock().date())
        return await self._insert(data)

    async def mark_paid(
        self,
        billing_id: Any,
        *,
        payment_method: str | None = None,
        payment_reference: str | None = None,
    ) -> Row:
        payload: dict[str, Any] = {"status": "paid", "payment_date": self.clock().date()}
        if payment_method:
            payload["payment_method"] = payment_method
        if payment_reference:
            payload["payment_reference"] = payment_reference
        return await self.update_by_id(billing_id, payload)
