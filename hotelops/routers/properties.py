"""Property CRUD routes."""

from __future__ import annotations

import uuid
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, Request, Response

from ..services import HotelOpsServices
from ..tenant.deps import get_current_property, get_services
from .listing import list_response

router = APIRouter(prefix="/properties", tags=["properties"])


@router.get("/")
async def property_list(request: Request, services: HotelOpsServices = Depends(get_services)):
    return await list_response(request, services.properties)


@router.post("/", status_code=201)
async def property_create(
    payload: dict[str, Any] = Body(...),
    services: HotelOpsServices = Depends(get_services),
):
    return await services.properties.create(payload)


@router.get("/{property_id}")
async def property_detail(prop: dict[str, Any] = Depends(get_current_property)):
    return prop


@router.patch("/{property_id}")
async def property_update(
    property_id: uuid.UUID,
    payload: dict[str, Any] = Body(...),
    services: HotelOpsServices = Depends(get_services),
):
    return await services.properties.update_by_id(property_id, payload)


@router.delete("/{property_id}", status_code=204)
async def property_delete(
    property_id: uuid.UUID,
    services: HotelOpsServices = Depends(get_services),
):
    if not await services.properties.get_by_id(property_id):
        raise HTTPException(status_code=404, detail=f"Property '{property_id}' not found")
    await services.properties.delete_by_id(property_id)
    return Response(status_code=204)
