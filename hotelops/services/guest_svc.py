"""Guest (CRM) service."""

from __future__ import annotations

from ..retry import RetryExecutor
from ..schemas.guest import GuestCreate, GuestUpdate
from ..store.base import Store
from .resource import ResourceService


class GuestService(ResourceService):
    def __init__(self, store: Store, retry: RetryExecutor, **kwargs):
        super().__init__(
            store,
            "guests",
            retry,
            create_schema=GuestCreate,
            update_schema=GuestUpdate,
            search_fields=("first_name", "last_name", "email", "phone"),
            **kwargs,
        )
