"""Cross-entity state propagation rules for hotel operations."""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any

from sqlalchemy import DateTime, Uuid, func, insert, literal, select, update

from ..models import (
    Billing,
    Guest,
    HousekeepingRequest,
    Notification,
    Property,
    Reservation,
    ReservationRoom,
    Revenue,
    Room,
    Staff,
)
from ..models.housekeeping import OPEN_STATUSES
from ..query.coerce import as_utc
from .engine import Row, TriggerContext, TriggerEngine, status_changed

logger = logging.getLogger(__name__)

AUTO_ASSIGN_NOTE = "Auto-assigned after guest checkout"
RESERVING_STATUSES = ("confirmed", "booked")
REVENUE_FIELDS = ("property_id", "amount", "currency", "category", "description", "status")


# ---------------------------------------------------------------------------
# Billing -> revenue mirror
# ---------------------------------------------------------------------------


async def billing_to_revenue(ctx: TriggerContext, old: Row | None, new: Row) -> None:
    """Upsert the single revenue row mirroring this billing."""
    revenues = Revenue.__table__
    values = {name: new.get(name) for name in REVENUE_FIELDS}
    updated = await ctx.update(revenues, [revenues.c.billing_id == new["id"]], values)
    if not updated:
        await ctx.insert(revenues, {**values, "billing_id": new["id"]})


# ---------------------------------------------------------------------------
# Reservation status -> room availability
# ---------------------------------------------------------------------------


async def update_room_availability(ctx: TriggerContext, old: Row | None, new: Row) -> None:
    if not status_changed(old, new):
        return

    status = new.get("status")
    if status in RESERVING_STATUSES:
        target = "reserved"
    elif old is not None and status == "cancelled" and old.get("status") != "cancelled":
        target = "available"
    else:
        return

    rooms = Room.__table__
    links = ReservationRoom.__table__
    linked = select(links.c.room_id).where(
        links.c.reservation_id == new["id"], links.c.room_id.is_not(None)
    )
    changed = await ctx.update(
        rooms,
        [rooms.c.id.in_(linked), rooms.c.property_id == new["property_id"]],
        {"status": target},
    )
    if changed:
        logger.info(
            "Reservation %s is %s: %d room(s) set to %s",
            new["id"], status, len(changed), target,
        )


# ---------------------------------------------------------------------------
# Checkout -> housekeeping round-robin
# ---------------------------------------------------------------------------


async def assign_checkout_housekeeping(
    ctx: TriggerContext,
    property_id: uuid.UUID,
    room_id: uuid.UUID,
    due_in: timedelta,
) -> Row | None:
    """Create a pending request for the least-loaded active housekeeper.

    The property row is locked first so concurrent checkouts on the same
    property queue up, then one INSERT ... SELECT picks the housekeeper with
    the fewest pending/in-progress requests and inserts the request. Ties go
    to the longest-serving staff member. Returns None when the property has
    no active housekeeping staff.
    """
    properties = Property.__table__
    staff = Staff.__table__
    requests = HousekeepingRequest.__table__

    await ctx.session.execute(
        select(properties.c.id).where(properties.c.id == property_id).with_for_update()
    )

    load = (
        select(func.count())
        .select_from(requests)
        .where(requests.c.assigned_to == staff.c.id, requests.c.status.in_(OPEN_STATUSES))
        .correlate(staff)
        .scalar_subquery()
    )
    request_id = uuid.uuid4()
    now = ctx.now()
    timestamp = DateTime(timezone=True)
    pick = (
        select(
            literal(request_id, Uuid()),
            literal(property_id, Uuid()),
            literal(room_id, Uuid()),
            literal("pending"),
            literal("medium"),
            literal(now, timestamp),
            literal(now + due_in, timestamp),
            staff.c.id,
            literal(AUTO_ASSIGN_NOTE),
            literal(False),
        )
        .where(
            staff.c.property_id == property_id,
            staff.c.role == "housekeeping",
            staff.c.is_active.is_(True),
        )
        .order_by(load.asc(), staff.c.created_at.asc(), staff.c.id.asc())
        .limit(1)
    )
    await ctx.session.execute(
        insert(requests).from_select(
            [
                "id", "property_id", "room_id", "status", "priority",
                "requested_at", "due_by", "assigned_to", "notes", "is_recurring",
            ],
            pick,
        )
    )

    rows = await ctx.fetch(select(requests).where(requests.c.id == request_id))
    if not rows:
        logger.info("No active housekeeping staff for property %s; room %s left unassigned",
                    property_id, room_id)
        return None

    request = rows[0]
    logger.info("Housekeeping request %s for room %s assigned to staff %s",
                request_id, room_id, request["assigned_to"])
    await ctx.fire(requests, "insert", None, request)
    return request


def make_auto_assign_housekeeping(due_in: timedelta):
    async def auto_assign_housekeeping(ctx: TriggerContext, old: Row | None, new: Row) -> None:
        if new.get("status") != "checkout":
            return
        if old is None or old.get("status") == "checkout":
            return
        await assign_checkout_housekeeping(ctx, new["property_id"], new["id"], due_in)

    return auto_assign_housekeeping


# ---------------------------------------------------------------------------
# Overdue sweep
# ---------------------------------------------------------------------------


async def mark_overdue_housekeeping(ctx: TriggerContext, now: datetime | None = None) -> int:
    """Set-based: every pending request past its due time becomes overdue."""
    requests = HousekeepingRequest.__table__
    cutoff = as_utc(now or ctx.now())
    result = await ctx.session.execute(
        update(requests)
        .where(requests.c.status == "pending", requests.c.due_by < cutoff)
        .values(status="overdue")
    )
    count = result.rowcount or 0
    if count:
        logger.info("Marked %d housekeeping request(s) overdue", count)
    return count


# ---------------------------------------------------------------------------
# Booking confirmation outbox
# ---------------------------------------------------------------------------


def _json_value(value: Any) -> Any:
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, uuid.UUID):
        return str(value)
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return value


async def queue_booking_confirmation(ctx: TriggerContext, old: Row | None, new: Row) -> None:
    if new.get("status") != "booked" or (old is not None and old.get("status") == "booked"):
        return

    guest = None
    if new.get("guest_id"):
        guests = Guest.__table__
        found = await ctx.fetch(select(guests).where(guests.c.id == new["guest_id"]))
        guest = found[0] if found else None
    properties = Property.__table__
    prop = await ctx.fetch(
        select(properties.c.name).where(properties.c.id == new["property_id"])
    )

    payload = {
        "booking_id": new["id"],
        "guest_email": guest.get("email") if guest else None,
        "guest_name": " ".join(
            p for p in ((guest or {}).get("first_name"), (guest or {}).get("last_name")) if p
        ) or None,
        "property_name": prop[0]["name"] if prop else None,
        "check_in_date": new.get("check_in_date"),
        "check_out_date": new.get("check_out_date"),
        "total_amount": new.get("total_amount"),
        "currency": new.get("currency"),
        "confirmation_code": new.get("confirmation_code"),
    }
    await ctx.insert(
        Notification.__table__,
        {
            "property_id": new["property_id"],
            "kind": "booking_confirmation",
            "subject_id": new["id"],
            "payload": {k: _json_value(v) for k, v in payload.items()},
        },
    )


def register_hotel_rules(
    engine: TriggerEngine,
    *,
    housekeeping_due: timedelta = timedelta(hours=3),
) -> TriggerEngine:
    """Install the standard rule set on ``engine``."""
    engine.register(Billing.__tablename__, ("insert", "update"), billing_to_revenue)
    engine.register(Reservation.__tablename__, ("insert", "update"), update_room_availability)
    engine.register(Reservation.__tablename__, ("update",), queue_booking_confirmation)
    engine.register(
        Room.__tablename__, ("update",), make_auto_assign_housekeeping(housekeeping_due)
    )
    return engine
