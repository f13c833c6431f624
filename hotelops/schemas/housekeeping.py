"""Housekeeping request schemas."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

HousekeepingStatus = Literal["pending", "in_progress", "completed", "cancelled", "overdue"]
HousekeepingPriority = Literal["low", "medium", "high", "urgent"]


class HousekeepingCreate(BaseModel):
    property_id: uuid.UUID
    room_id: uuid.UUID
    status: HousekeepingStatus = "pending"
    priority: HousekeepingPriority = "medium"
    due_by: datetime | None = None
    assigned_to: uuid.UUID | None = None
    notes: str | None = None
    issue_type: str | None = None
    reported_by: str | None = None
    is_recurring: bool = False
    recurrence_pattern: str | None = None


class HousekeepingUpdate(BaseModel):
    status: HousekeepingStatus | None = None
    priority: HousekeepingPriority | None = None
    due_by: datetime | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None
    assigned_to: uuid.UUID | None = None
    notes: str | None = None
    issue_type: str | None = None
    duration_minutes: int | None = Field(default=None, ge=0)
    is_recurring: bool | None = None
    recurrence_pattern: str | None = None
