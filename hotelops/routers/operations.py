"""Domain actions under a property: checkout, housekeeping lifecycle, billing, stats."""

from __future__ import annotations

import uuid
from datetime import date
from typing import Any

from fastapi import APIRouter, Body, Depends

from ..services import HotelOpsServices
from ..tenant.deps import get_owned_row, get_property_id, get_services

router = APIRouter(prefix="/properties/{property_id}", tags=["operations"])


@router.post("/rooms/{room_id}/checkout")
async def room_checkout(
    room_id: uuid.UUID,
    property_id: uuid.UUID = Depends(get_property_id),
    services: HotelOpsServices = Depends(get_services),
):
    await get_owned_row(services.rooms, room_id, property_id)
    return await services.rooms.mark_checkout(room_id)


@router.get("/reservations/arrivals")
async def reservation_arrivals(
    property_id: uuid.UUID = Depends(get_property_id),
    services: HotelOpsServices = Depends(get_services),
):
    return {"data": await services.reservations.get_today_arrivals(property_id)}


@router.get("/reservations/departures")
async def reservation_departures(
    property_id: uuid.UUID = Depends(get_property_id),
    services: HotelOpsServices = Depends(get_services),
):
    return {"data": await services.reservations.get_today_departures(property_id)}


@router.get("/reservations/statistics")
async def reservation_statistics(
    start_date: date,
    end_date: date,
    property_id: uuid.UUID = Depends(get_property_id),
    services: HotelOpsServices = Depends(get_services),
):
    return await services.reservations.get_statistics(property_id, start_date, end_date)


@router.post("/reservations/with-rooms", status_code=201)
async def reservation_create_with_rooms(
    payload: dict[str, Any] = Body(...),
    property_id: uuid.UUID = Depends(get_property_id),
    services: HotelOpsServices = Depends(get_services),
):
    reservation = {**(payload.get("reservation") or {}), "property_id": property_id}
    return await services.reservations.create_with_rooms(reservation, payload.get("rooms") or [])


@router.get("/reservations/{reservation_id}/rooms")
async def reservation_rooms(
    reservation_id: uuid.UUID,
    property_id: uuid.UUID = Depends(get_property_id),
    services: HotelOpsServices = Depends(get_services),
):
    await get_owned_row(services.reservations, reservation_id, property_id)
    return {"data": await services.reservations.get_rooms(reservation_id)}


@router.post("/housekeeping/{request_id}/start")
async def housekeeping_start(
    request_id: uuid.UUID,
    property_id: uuid.UUID = Depends(get_property_id),
    services: HotelOpsServices = Depends(get_services),
):
    await get_owned_row(services.housekeeping, request_id, property_id)
    return await services.housekeeping.start(request_id)


@router.post("/housekeeping/{request_id}/complete")
async def housekeeping_complete(
    request_id: uuid.UUID,
    payload: dict[str, Any] | None = Body(default=None),
    property_id: uuid.UUID = Depends(get_property_id),
    services: HotelOpsServices = Depends(get_services),
):
    await get_owned_row(services.housekeeping, request_id, property_id)
    return await services.housekeeping.complete(request_id, (payload or {}).get("notes"))


@router.get("/housekeeping/overdue")
async def housekeeping_overdue(
    property_id: uuid.UUID = Depends(get_property_id),
    services: HotelOpsServices = Depends(get_services),
):
    return {"data": await services.housekeeping.list_overdue(property_id)}


@router.post("/billings/{billing_id}/pay")
async def billing_pay(
    billing_id: uuid.UUID,
    payload: dict[str, Any] | None = Body(default=None),
    property_id: uuid.UUID = Depends(get_property_id),
    services: HotelOpsServices = Depends(get_services),
):
    await get_owned_row(services.billings, billing_id, property_id)
    payload = payload or {}
    return await services.billings.mark_paid(
        billing_id,
        payment_method=payload.get("payment_method"),
        payment_reference=payload.get("payment_reference"),
    )
