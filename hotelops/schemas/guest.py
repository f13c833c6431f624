"""Guest schemas."""

from __future__ import annotations

import uuid

from pydantic import BaseModel


class GuestCreate(BaseModel):
    property_id: uuid.UUID
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    phone: str | None = None
    nationality: str | None = None
    is_vip: bool = False
    notes: str | None = None


class GuestUpdate(BaseModel):
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    phone: str | None = None
    nationality: str | None = None
    is_vip: bool | None = None
    notes: str | None = None
