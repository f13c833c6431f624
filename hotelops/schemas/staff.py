"""Staff schemas."""

from __future__ import annotations

import uuid
from typing import Literal

from pydantic import BaseModel, Field

StaffRole = Literal["manager", "front_desk", "housekeeping", "maintenance"]


class StaffCreate(BaseModel):
    property_id: uuid.UUID
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str | None = None
    email: str | None = None
    phone_number: str | None = None
    role: StaffRole = "front_desk"
    is_active: bool = True


class StaffUpdate(BaseModel):
    first_name: str | None = Field(default=None, min_length=1, max_length=100)
    last_name: str | None = None
    email: str | None = None
    phone_number: str | None = None
    role: StaffRole | None = None
    is_active: bool | None = None
