"""Property service - the tenant root."""

from __future__ import annotations

from ..retry import RetryExecutor
from ..schemas.property import PropertyCreate, PropertyUpdate
from ..store.base import Store
from .resource import ResourceService


class PropertyService(ResourceService):
    def __init__(self, store: Store, retry: RetryExecutor, **kwargs):
        super().__init__(
            store,
            "properties",
            retry,
            create_schema=PropertyCreate,
            update_schema=PropertyUpdate,
            search_fields=("name", "code", "city"),
            default_order=(("name", True),),
            **kwargs,
        )
