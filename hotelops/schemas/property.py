"""Property schemas."""

from __future__ import annotations

from pydantic import BaseModel, Field


class PropertyCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    code: str | None = Field(default=None, max_length=10)
    timezone: str = "UTC"
    currency: str = Field(default="USD", min_length=3, max_length=3)
    address: str | None = None
    city: str | None = None
    country: str | None = None
    is_active: bool = True


class PropertyUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    code: str | None = Field(default=None, max_length=10)
    timezone: str | None = None
    currency: str | None = Field(default=None, min_length=3, max_length=3)
    address: str | None = None
    city: str | None = None
    country: str | None = None
    is_active: bool | None = None
