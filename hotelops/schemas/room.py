"""Room schemas."""

from __future__ import annotations

import uuid
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, Field

RoomStatus = Literal["available", "occupied", "maintenance", "cleaning", "reserved", "checkout"]


class RoomCreate(BaseModel):
    property_id: uuid.UUID
    number: str = Field(min_length=1, max_length=20)
    floor: int | None = None
    room_type: str | None = None
    status: RoomStatus = "available"
    base_rate: Decimal | None = Field(default=None, ge=0)
    max_occupancy: int = Field(default=2, ge=1)


class RoomUpdate(BaseModel):
    number: str | None = Field(default=None, min_length=1, max_length=20)
    floor: int | None = None
    room_type: str | None = None
    status: RoomStatus | None = None
    base_rate: Decimal | None = Field(default=None, ge=0)
    max_occupancy: int | None = Field(default=None, ge=1)
