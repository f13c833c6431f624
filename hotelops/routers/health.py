"""Health and readiness checks."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ..query.pagination import PageRange
from ..results import Err
from ..services import HotelOpsServices
from ..tenant.deps import get_services

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check():
    return {"status": "healthy", "service": "hotelops"}


@router.get("/ready")
async def readiness_check(services: HotelOpsServices = Depends(get_services)):
    result = await services.store.select("properties", page=PageRange(0, 0))
    if isinstance(result, Err):
        return JSONResponse(
            status_code=503,
            content={"status": "unavailable", "service": "hotelops", "code": result.error.code},
        )
    return {"status": "ready", "service": "hotelops"}
