"""Test the cross-entity trigger rules."""

from __future__ import annotations

from datetime import timedelta, timezone

import pytest
from sqlalchemy import select

from hotelops.errors import StoreError
from hotelops.models import HousekeepingRequest, Notification, Revenue
from hotelops.store import SQLStore, id_condition
from hotelops.triggers import TriggerEngine, register_hotel_rules
from hotelops.triggers.rules import AUTO_ASSIGN_NOTE

from .conftest import NOW, add_housekeeper


async def _fetch(session_factory, stmt):
    async with session_factory() as session:
        return [dict(r) for r in (await session.execute(stmt)).mappings().all()]


async def _reservation_with_rooms(services, prop, rooms, status="pending"):
    return await services.reservations.create_with_rooms(
        {
            "property_id": prop["id"],
            "check_in_date": "2026-10-19",
            "check_out_date": "2026-10-21",
            "status": status,
            "total_amount": "240.00",
        },
        [{"room_id": r["id"], "rate_amount": "120.00"} for r in rooms],
    )


async def _room(services, prop, number, status="available"):
    return await services.rooms.create({"property_id": prop["id"], "number": number, "status": status})


async def _open_requests(services, prop, room, staff, statuses):
    for status in statuses:
        await services.housekeeping.create(
            {"property_id": prop["id"], "room_id": room["id"], "assigned_to": staff["id"], "status": status}
        )


class TestBillingRevenueMirror:
    @pytest.mark.asyncio
    async def test_upsert_is_idempotent(self, services, prop, session_factory):
        billing = await services.billings.create(
            {"property_id": prop["id"], "amount": "200.00", "category": "room", "status": "pending"}
        )
        revenues = await _fetch(session_factory, select(Revenue.__table__))
        assert len(revenues) == 1
        assert revenues[0]["billing_id"] == billing["id"]
        assert float(revenues[0]["amount"]) == 200.0

        await services.billings.update_by_id(billing["id"], {"amount": "250.00"})
        await services.billings.update_by_id(billing["id"], {"amount": "250.00"})
        await services.billings.mark_paid(billing["id"], payment_method="card")

        revenues = await _fetch(session_factory, select(Revenue.__table__))
        assert len(revenues) == 1
        assert float(revenues[0]["amount"]) == 250.0
        assert revenues[0]["status"] == "paid"
        assert revenues[0]["property_id"] == prop["id"]


class TestReservationRoomStatus:
    @pytest.mark.asyncio
    async def test_confirmed_on_insert_reserves_rooms(self, services, prop):
        a = await _room(services, prop, "101")
        b = await _room(services, prop, "102")
        await _reservation_with_rooms(services, prop, [a, b], status="confirmed")
        assert (await services.rooms.get_by_id(a["id"]))["status"] == "reserved"
        assert (await services.rooms.get_by_id(b["id"]))["status"] == "reserved"

    @pytest.mark.asyncio
    async def test_status_transitions(self, services, prop):
        a = await _room(services, prop, "101")
        other = await _room(services, prop, "102")
        reservation = await _reservation_with_rooms(services, prop, [a])
        assert (await services.rooms.get_by_id(a["id"]))["status"] == "available"

        await services.reservations.update_status(reservation["id"], "booked")
        assert (await services.rooms.get_by_id(a["id"]))["status"] == "reserved"

        await services.reservations.update_status(reservation["id"], "cancelled")
        assert (await services.rooms.get_by_id(a["id"]))["status"] == "available"
        assert (await services.rooms.get_by_id(other["id"]))["status"] == "available"

    @pytest.mark.asyncio
    async def test_checked_in_leaves_rooms_alone(self, services, prop):
        a = await _room(services, prop, "101")
        reservation = await _reservation_with_rooms(services, prop, [a], status="confirmed")
        await services.reservations.update_status(reservation["id"], "checked_in")
        assert (await services.rooms.get_by_id(a["id"]))["status"] == "reserved"

    @pytest.mark.asyncio
    async def test_unchanged_status_does_not_touch_rooms(self, services, prop):
        a = await _room(services, prop, "101")
        reservation = await _reservation_with_rooms(services, prop, [a], status="confirmed")
        await services.rooms.set_status(a["id"], "occupied")
        await services.reservations.update_by_id(reservation["id"], {"adults": 2})
        assert (await services.rooms.get_by_id(a["id"]))["status"] == "occupied"


class TestCheckoutRoundRobin:
    @pytest.mark.asyncio
    async def test_least_loaded_housekeeper_gets_the_request(self, services, prop, room):
        hk_a = await add_housekeeper(services, prop, "Ana", NOW - timedelta(days=3))
        hk_b = await add_housekeeper(services, prop, "Ben", NOW - timedelta(days=2))
        hk_c = await add_housekeeper(services, prop, "Cy", NOW - timedelta(days=1))
        await _open_requests(services, prop, room, hk_a, ["pending", "pending", "in_progress"])
        await _open_requests(services, prop, room, hk_b, ["pending"])
        await _open_requests(services, prop, room, hk_c, ["pending", "in_progress"])

        await services.rooms.mark_checkout(room["id"])

        auto = await services.housekeeping.find({"notes": AUTO_ASSIGN_NOTE})
        assert len(auto) == 1
        request = auto[0]
        assert request["assigned_to"] == hk_b["id"]
        assert request["status"] == "pending"
        assert request["priority"] == "medium"
        assert request["room_id"] == room["id"]

    @pytest.mark.asyncio
    async def test_ties_go_to_longest_serving(self, services, prop):
        hk_new = await add_housekeeper(services, prop, "New", NOW - timedelta(days=1))
        hk_old = await add_housekeeper(services, prop, "Old", NOW - timedelta(days=30))
        first = await _room(services, prop, "201", status="occupied")
        second = await _room(services, prop, "202", status="occupied")

        await services.rooms.mark_checkout(first["id"])
        await services.rooms.mark_checkout(second["id"])

        auto = await services.housekeeping.find({"notes": AUTO_ASSIGN_NOTE})
        by_room = {r["room_id"]: r["assigned_to"] for r in auto}
        assert by_room == {first["id"]: hk_old["id"], second["id"]: hk_new["id"]}

    @pytest.mark.asyncio
    async def test_closed_requests_do_not_count_as_load(self, services, prop, room):
        busy = await add_housekeeper(services, prop, "Busy", NOW - timedelta(days=2))
        idle = await add_housekeeper(services, prop, "Idle", NOW - timedelta(days=1))
        await _open_requests(services, prop, room, busy, ["completed", "cancelled", "overdue"])
        await _open_requests(services, prop, room, idle, ["pending"])

        await services.rooms.mark_checkout(room["id"])
        auto = await services.housekeeping.find({"notes": AUTO_ASSIGN_NOTE})
        assert auto[0]["assigned_to"] == busy["id"]

    @pytest.mark.asyncio
    async def test_only_active_housekeepers_of_the_property(self, services, prop, room):
        other = await services.properties.create({"name": "Annex"})
        await add_housekeeper(services, prop, "Gone", NOW - timedelta(days=9), is_active=False)
        await add_housekeeper(services, other, "Elsewhere", NOW - timedelta(days=8))
        await services.staff.create({"property_id": prop["id"], "first_name": "Desk", "role": "front_desk"})
        eligible = await add_housekeeper(services, prop, "Here", NOW)

        await services.rooms.mark_checkout(room["id"])
        auto = await services.housekeeping.find({"notes": AUTO_ASSIGN_NOTE})
        assert [r["assigned_to"] for r in auto] == [eligible["id"]]

    @pytest.mark.asyncio
    async def test_due_three_hours_after_checkout(self, services, prop, room, clock):
        await add_housekeeper(services, prop, "Ana", NOW)
        await services.rooms.mark_checkout(room["id"])
        request = (await services.housekeeping.find({"notes": AUTO_ASSIGN_NOTE}))[0]
        due = request["due_by"].replace(tzinfo=None)
        assert due == (clock() + timedelta(hours=3)).replace(tzinfo=None)

    @pytest.mark.asyncio
    async def test_no_eligible_staff_creates_nothing(self, services, prop, room):
        updated = await services.rooms.mark_checkout(room["id"])
        assert updated["status"] == "checkout"
        assert await services.housekeeping.find({"property_id": prop["id"]}) == []

    @pytest.mark.asyncio
    async def test_repeated_checkout_status_does_not_reassign(self, services, prop, room):
        await add_housekeeper(services, prop, "Ana", NOW)
        await services.rooms.mark_checkout(room["id"])
        await services.rooms.update_by_id(room["id"], {"status": "checkout", "floor": 2})
        assert len(await services.housekeeping.find({"notes": AUTO_ASSIGN_NOTE})) == 1


class TestOverdueSweep:
    @pytest.mark.asyncio
    async def test_only_pending_past_due_requests_are_marked(self, services, store, prop, room, clock):
        past = clock() - timedelta(minutes=1)
        future = clock() + timedelta(hours=1)
        cases = {
            "pending_past": ("pending", past),
            "pending_future": ("pending", future),
            "in_progress_past": ("in_progress", past),
            "completed_past": ("completed", past),
        }
        ids = {}
        for name, (status, due_by) in cases.items():
            row = await services.housekeeping.create(
                {"property_id": prop["id"], "room_id": room["id"], "status": status, "due_by": due_by}
            )
            ids[name] = row["id"]

        result = await store.rpc("mark_overdue_housekeeping")
        assert result.value == 1

        statuses = {name: (await services.housekeeping.get_by_id(i))["status"] for name, i in ids.items()}
        assert statuses == {
            "pending_past": "overdue",
            "pending_future": "pending",
            "in_progress_past": "in_progress",
            "completed_past": "completed",
        }

        assert (await store.rpc("mark_overdue_housekeeping")).value == 0

        clock.advance(hours=2)
        assert (await store.rpc("mark_overdue_housekeeping")).value == 1
        assert (await services.housekeeping.get_by_id(ids["pending_future"]))["status"] == "overdue"

    @pytest.mark.asyncio
    async def test_due_times_with_an_offset_are_compared_in_utc(self, services, store, prop, room, clock):
        plus_five = timezone(timedelta(hours=5))
        late = await services.housekeeping.create(
            {
                "property_id": prop["id"],
                "room_id": room["id"],
                "due_by": (clock() - timedelta(hours=1)).astimezone(plus_five),
            }
        )
        early = await services.housekeeping.create(
            {
                "property_id": prop["id"],
                "room_id": room["id"],
                "due_by": (clock() + timedelta(hours=1)).astimezone(timezone(timedelta(hours=-3))),
            }
        )

        stored = await services.housekeeping.get_by_id(late["id"])
        assert stored["due_by"].replace(tzinfo=None) == (clock() - timedelta(hours=1)).replace(tzinfo=None)
        assert [r["id"] for r in await services.housekeeping.list_overdue(prop["id"])] == [late["id"]]

        assert (await store.rpc("mark_overdue_housekeeping")).value == 1
        assert (await services.housekeeping.get_by_id(late["id"]))["status"] == "overdue"
        assert (await services.housekeeping.get_by_id(early["id"]))["status"] == "pending"


class TestBookingConfirmation:
    @pytest.mark.asyncio
    async def test_booked_queues_one_notification(self, services, prop, session_factory):
        guest = await services.guests.create(
            {"property_id": prop["id"], "first_name": "Ann", "last_name": "Lee", "email": "ann@example.com"}
        )
        reservation = await services.reservations.create(
            {
                "property_id": prop["id"],
                "guest_id": guest["id"],
                "check_in_date": "2026-10-19",
                "check_out_date": "2026-10-20",
            }
        )
        await services.reservations.update_status(reservation["id"], "booked")
        await services.reservations.update_payment_status(reservation["id"], "paid")

        notes = await _fetch(session_factory, select(Notification.__table__))
        assert len(notes) == 1
        payload = notes[0]["payload"]
        assert notes[0]["kind"] == "booking_confirmation"
        assert payload["guest_email"] == "ann@example.com"
        assert payload["guest_name"] == "Ann Lee"
        assert payload["property_name"] == "Grand Hotel"
        assert payload["check_in_date"] == "2026-10-19"


class TestEngine:
    @pytest.mark.asyncio
    async def test_failing_rule_rolls_back_the_write(self, session_factory, prop):
        engine = TriggerEngine()

        @engine.on("rooms", "update")
        async def explode(ctx, old, new):
            raise RuntimeError("rule failed")

        store = SQLStore(session_factory, triggers=engine)
        room = (await store.insert("rooms", {"property_id": prop["id"], "number": "9"})).value[0]
        with pytest.raises(RuntimeError):
            await store.update("rooms", id_condition(room["id"]), {"status": "maintenance"})
        assert (await store.select_one("rooms", id_condition(room["id"]))).value["status"] == "available"

    @pytest.mark.asyncio
    async def test_recursion_is_bounded(self, session_factory, prop):
        engine = TriggerEngine()
        store = SQLStore(session_factory, triggers=engine)
        rooms = store.table("rooms")

        @engine.on("rooms", "update")
        async def bump(ctx, old, new):
            await ctx.update(rooms, [rooms.c.id == new["id"]], {"floor": (new["floor"] or 0) + 1})

        room = (await store.insert("rooms", {"property_id": prop["id"], "number": "9"})).value[0]
        with pytest.raises(StoreError) as info:
            await store.update("rooms", id_condition(room["id"]), {"floor": 0})
        assert info.value.code == "TRIGGER_RECURSION"

    def test_unknown_event_rejected(self):
        with pytest.raises(ValueError):
            TriggerEngine().register("rooms", ["delete"], lambda ctx, old, new: None)

    def test_standard_rules_registered(self):
        engine = register_hotel_rules(TriggerEngine())
        assert len(engine.rules_for("billings", "insert")) == 1
        assert len(engine.rules_for("reservations", "update")) == 2
        assert len(engine.rules_for("rooms", "update")) == 1
        assert engine.rules_for("rooms", "insert") == []
