"""FastAPI dependencies for service access and tenant resolution."""

from __future__ import annotations

import uuid
from typing import Any

from fastapi import Depends, HTTPException, Path, Request

from ..services import HotelOpsServices, ResourceService


def get_services(request: Request) -> HotelOpsServices:
    """Services built at startup and kept on ``app.state``."""
    return request.app.state.services


async def get_current_property(
    property_id: uuid.UUID = Path(..., description="Property id"),
    services: HotelOpsServices = Depends(get_services),
) -> dict[str, Any]:
    """Resolve the tenant property. Raises 404 if not found."""
    prop = await services.properties.get_by_id(property_id)
    if not prop:
        raise HTTPException(status_code=404, detail=f"Property '{property_id}' not found")
    return prop


async def get_property_id(
    prop: dict[str, Any] = Depends(get_current_property),
) -> uuid.UUID:
    """Shorthand dependency that returns just the property id."""
    return uuid.UUID(str(prop["id"]))


def get_resource_service(
    resource: str = Path(..., description="Resource collection"),
    services: HotelOpsServices = Depends(get_services),
) -> ResourceService:
    service = services.resources().get(resource)
    if service is None:
        raise HTTPException(status_code=404, detail=f"Unknown resource '{resource}'")
    return service


async def get_owned_row(
    service: ResourceService, row_id: uuid.UUID, property_id: uuid.UUID
) -> dict[str, Any]:
    """Row by id, 404 unless it belongs to ``property_id``."""
    row = await service.get_by_id(row_id)
    if row is None or str(row.get("property_id")) != str(property_id):
        raise HTTPException(status_code=404, detail=f"{service.table} row '{row_id}' not found")
    return row
