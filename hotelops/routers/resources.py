"""Generic tenant-scoped CRUD for every resource collection."""

from __future__ import annotations

import uuid
from typing import Any

from fastapi import APIRouter, Body, Depends, Request, Response

from ..services import ResourceService
from ..tenant.deps import get_owned_row, get_property_id, get_resource_service
from .listing import list_response

router = APIRouter(prefix="/properties/{property_id}/{resource}", tags=["resources"])


@router.get("/")
async def resource_list(
    request: Request,
    property_id: uuid.UUID = Depends(get_property_id),
    service: ResourceService = Depends(get_resource_service),
):
    return await list_response(request, service, forced={"property_id": property_id})


@router.post("/", status_code=201)
async def resource_create(
    payload: dict[str, Any] = Body(...),
    property_id: uuid.UUID = Depends(get_property_id),
    service: ResourceService = Depends(get_resource_service),
):
    return await service.create({**payload, "property_id": property_id})


@router.get("/{row_id}")
async def resource_detail(
    row_id: uuid.UUID,
    property_id: uuid.UUID = Depends(get_property_id),
    service: ResourceService = Depends(get_resource_service),
):
    return await get_owned_row(service, row_id, property_id)


@router.patch("/{row_id}")
async def resource_update(
    row_id: uuid.UUID,
    payload: dict[str, Any] = Body(...),
    property_id: uuid.UUID = Depends(get_property_id),
    service: ResourceService = Depends(get_resource_service),
):
    await get_owned_row(service, row_id, property_id)
    return await service.update_by_id(row_id, payload)


@router.delete("/{row_id}", status_code=204)
async def resource_delete(
    row_id: uuid.UUID,
    property_id: uuid.UUID = Depends(get_property_id),
    service: ResourceService = Depends(get_resource_service),
):
    await get_owned_row(service, row_id, property_id)
    await service.delete_by_id(row_id)
    return Response(status_code=204)
