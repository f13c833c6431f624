"""Stored procedures exposed through ``Store.rpc``.

Each procedure runs inside one transaction via a ``TriggerContext``.
"""

from __future__ import annotations

import logging
import secrets
from datetime import date
from decimal import Decimal
from typing import Any, Awaitable, Callable

from sqlalchemy import func, select

from ..errors import ValidationError
from ..models import Billing, Property, Reservation, ReservationRoom, Room
from ..query.coerce import coerce_row, coerce_value
from .engine import TriggerContext
from .rules import mark_overdue_housekeeping

logger = logging.getLogger(__name__)

Procedure = Callable[[TriggerContext, dict[str, Any]], Awaitable[Any]]

# Ambiguous characters (O/0, I/1) left out.
CONFIRMATION_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
BOOKING_NUMBER_ATTEMPTS = 5


def generate_confirmation_code(length: int = 6) -> str:
    return "".join(secrets.choice(CONFIRMATION_ALPHABET) for _ in range(length))


async def _property_code(ctx: TriggerContext, property_id: Any, fallback: str) -> str:
    properties = Property.__table__
    pid = coerce_value(properties.c.id, property_id)
    rows = await ctx.fetch(
        select(properties.c.name, properties.c.code).where(properties.c.id == pid)
    )
    if not rows:
        return fallback
    code = rows[0]["code"] or (rows[0]["name"] or "")[:3]
    return code.upper() or fallback


async def generate_booking_number(ctx: TriggerContext, params: dict[str, Any]) -> str:
    """``<CODE><YYMMDD><4 random digits>``, retried until unused."""
    code = await _property_code(ctx, params.get("property_id"), "BKG")
    date_code = ctx.now().strftime("%y%m%d")
    reservations = Reservation.__table__
    for _ in range(BOOKING_NUMBER_ATTEMPTS):
        candidate = f"{code}{date_code}{1000 + secrets.randbelow(9000)}"
        taken = await ctx.fetch(
            select(reservations.c.id).where(reservations.c.booking_number == candidate)
        )
        if not taken:
            return candidate
    raise ValidationError("Could not allocate a unique booking number")


async def generate_invoice_number(ctx: TriggerContext, params: dict[str, Any]) -> str:
    """``<CODE><YYMMDD><daily sequence, at least 3 digits>``.

    Invoice numbers are unique across properties, so the sequence continues
    from the highest number already issued under the prefix by any property.
    Deleted billings leave gaps; their numbers are not reused.
    """
    code = await _property_code(ctx, params.get("property_id"), "INV")
    prefix = f"{code}{ctx.now().strftime('%y%m%d')}"
    billings = Billing.__table__
    issued = (
        await ctx.session.execute(
            select(billings.c.invoice_number).where(
                billings.c.invoice_number.startswith(prefix, autoescape=True)
            )
        )
    ).scalars().all()
    last = max(
        (int(number[len(prefix):]) for number in issued if number[len(prefix):].isdigit()),
        default=0,
    )
    return f"{prefix}{last + 1:03d}"


async def create_reservation(ctx: TriggerContext, params: dict[str, Any]) -> dict[str, Any]:
    """Insert a reservation and its room lines atomically.

    The reservation's insert rules fire after the room lines exist, so a
    reservation created as confirmed/booked reserves its rooms immediately.
    """
    reservations = Reservation.__table__
    links = ReservationRoom.__table__
    data = dict(params.get("reservation_data") or {})
    if not data:
        raise ValidationError("reservation_data is required")

    if not data.get("booking_number"):
        data["booking_number"] = await generate_booking_number(
            ctx, {"property_id": data.get("property_id")}
        )
    data.setdefault("confirmation_code", generate_confirmation_code())

    rooms = Room.__table__
    room_ids = {
        coerce_value(rooms.c.id, line["room_id"])
        for line in params.get("room_data") or []
        if line.get("room_id")
    }
    if room_ids:
        owned = await ctx.fetch(
            select(rooms.c.id).where(
                rooms.c.id.in_(list(room_ids)),
                rooms.c.property_id == coerce_value(rooms.c.property_id, data.get("property_id")),
            )
        )
        if len(owned) != len(room_ids):
            raise ValidationError("Reservation rooms must belong to the reservation's property")

    reservation = await ctx.insert(reservations, coerce_row(reservations, data), fire=False)
    for line in params.get("room_data") or []:
        values = coerce_row(links, {**line, "reservation_id": reservation["id"]})
        await ctx.insert(links, values)
    await ctx.fire(reservations, "insert", None, reservation)
    logger.info("Created reservation %s (%s)", reservation["id"], reservation["booking_number"])
    return reservation


async def reservation_statistics(ctx: TriggerContext, params: dict[str, Any]) -> dict[str, Any]:
    """Counts, revenue, ADR and occupancy for a property over a date window."""
    reservations = Reservation.__table__
    rooms = Room.__table__
    property_id = coerce_value(reservations.c.property_id, params.get("property_id"))
    start = coerce_value(reservations.c.check_in_date, params.get("start_date"))
    end = coerce_value(reservations.c.check_in_date, params.get("end_date"))

    stmt = select(reservations).where(reservations.c.property_id == property_id)
    if start:
        stmt = stmt.where(reservations.c.check_in_date >= start)
    if end:
        stmt = stmt.where(reservations.c.check_in_date <= end)
    rows = await ctx.fetch(stmt)

    by_status: dict[str, int] = {}
    for row in rows:
        by_status[row["status"]] = by_status.get(row["status"], 0) + 1

    earning = [r for r in rows if r["status"] not in ("cancelled", "no_show")]
    total_revenue = sum((Decimal(str(r["total_amount"] or 0)) for r in earning), Decimal("0"))
    room_nights = sum(_nights(r["check_in_date"], r["check_out_date"]) for r in earning)
    adr = (total_revenue / room_nights) if room_nights else Decimal("0")

    room_count = (
        await ctx.session.execute(
            select(func.count()).select_from(rooms).where(rooms.c.property_id == property_id)
        )
    ).scalar() or 0
    window = _nights(start, end) + 1 if start and end else 0
    occupancy = (room_nights / (room_count * window)) if room_count and window else 0.0

    return {
        "total_reservations": len(rows),
        "confirmed_reservations": by_status.get("confirmed", 0) + by_status.get("booked", 0),
        "cancelled_reservations": by_status.get("cancelled", 0),
        "no_show_reservations": by_status.get("no_show", 0),
        "total_revenue": float(total_revenue),
        "average_daily_rate": float(round(adr, 2)),
        "occupancy_rate": round(min(occupancy, 1.0), 4),
    }


def _nights(check_in: date | None, check_out: date | None) -> int:
    if not check_in or not check_out:
        return 0
    return max((check_out - check_in).days, 0)


async def sweep_overdue(ctx: TriggerContext, params: dict[str, Any]) -> int:
    return await mark_overdue_housekeeping(ctx)


PROCEDURES: dict[str, Procedure] = {
    "create_reservation": create_reservation,
    "generate_booking_number": generate_booking_number,
    "generate_invoice_number": generate_invoice_number,
    "reservation_statistics": reservation_statistics,
    "mark_overdue_housekeeping": sweep_overdue,
}
