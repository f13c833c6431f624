"""Test the generic resource service."""

from __future__ import annotations

import uuid

import pytest

from hotelops.errors import (
    NoDataReturned,
    RetryExhausted,
    RowNotFound,
    StoreError,
    TransientStoreError,
    ValidationError,
)
from hotelops.results import Err, Ok
from hotelops.retry import RetryExecutor, RetryPolicy
from hotelops.schemas.room import RoomCreate
from hotelops.services import ResourceService


class FakeStore:
    """Store double returning scripted results and recording calls."""

    def __init__(self, **results):
        self.results = {name: list(values) for name, values in results.items()}
        self.calls = []

    def _next(self, name):
        self.calls.append(name)
        return self.results[name].pop(0)

    async def select(self, table, **kwargs):
        return self._next("select")

    async def select_one(self, table, conditions):
        return self._next("select_one")

    async def insert(self, table, payload):
        return self._next("insert")

    async def update(self, table, conditions, payload):
        return self._next("update")

    async def delete(self, table, conditions):
        return self._next("delete")

    async def rpc(self, name, params=None):
        return self._next("rpc")


def _transient():
    return Err(TransientStoreError("connection lost", code="08006"))


@pytest.mark.asyncio
async def test_create_validates_before_store_call(retry):
    store = FakeStore()
    service = ResourceService(store, "rooms", retry, create_schema=RoomCreate)
    with pytest.raises(ValidationError) as info:
        await service.create({"number": "101"})
    assert store.calls == []
    assert info.value.errors[0]["loc"] == ("property_id",)


@pytest.mark.asyncio
async def test_create_empty_response_raises_no_data(retry):
    store = FakeStore(insert=[Ok([])])
    service = ResourceService(store, "rooms", retry)
    with pytest.raises(NoDataReturned):
        await service.create({"number": "101"})


@pytest.mark.asyncio
async def test_mutations_retry_then_succeed(retry, sleep):
    store = FakeStore(update=[_transient(), Ok([{"id": 1, "floor": 2}])])
    service = ResourceService(store, "rooms", retry)
    row = await service.update_by_id(1, {"floor": 2})
    assert row["floor"] == 2
    assert store.calls == ["update", "update"]
    assert sleep.delays == [0.5]


@pytest.mark.asyncio
async def test_mutation_exhaustion(retry):
    store = FakeStore(delete=[_transient(), _transient(), _transient()])
    service = ResourceService(store, "rooms", retry)
    with pytest.raises(RetryExhausted) as info:
        await service.delete_by_id(1)
    assert info.value.cause.code == "08006"


@pytest.mark.asyncio
async def test_reads_are_not_retried_by_default(retry):
    store = FakeStore(select_one=[_transient()])
    service = ResourceService(store, "rooms", retry)
    with pytest.raises(StoreError):
        await service.get_by_id(1)
    assert store.calls == ["select_one"]


@pytest.mark.asyncio
async def test_reads_retry_when_enabled(sleep):
    retry = RetryExecutor(RetryPolicy(max_attempts=2, base_delay_ms=10), sleep=sleep)
    store = FakeStore(select_one=[_transient(), Ok({"id": 1})])
    service = ResourceService(store, "rooms", retry, retry_reads=True)
    assert await service.get_by_id(1) == {"id": 1}
    assert sleep.delays == [0.01]


@pytest.mark.asyncio
async def test_missing_row_with_read_retries_is_none_without_retrying(sleep):
    retry = RetryExecutor(RetryPolicy(max_attempts=3), sleep=sleep)
    store = FakeStore(select_one=[Err(StoreError("no rows", code="PGRST116"))])
    service = ResourceService(store, "rooms", retry, retry_reads=True)
    assert await service.get_by_id(1) is None
    assert sleep.delays == []


@pytest.mark.asyncio
async def test_list_uses_row_count_when_store_has_no_total(retry):
    store = FakeStore(select=[Ok([{"id": 1}, {"id": 2}])])
    service = ResourceService(store, "rooms", retry)
    page = await service.list()
    assert page.total_count == 2


class TestAgainstSQLStore:
    @pytest.mark.asyncio
    async def test_crud_cycle(self, services, prop):
        room = await services.rooms.create({"property_id": prop["id"], "number": "101"})
        assert (await services.rooms.get_by_id(room["id"]))["number"] == "101"

        updated = await services.rooms.update_by_id(room["id"], {"floor": 1})
        assert updated["floor"] == 1

        await services.rooms.delete_by_id(room["id"])
        assert await services.rooms.get_by_id(room["id"]) is None

    @pytest.mark.asyncio
    async def test_get_missing_is_none(self, services):
        assert await services.rooms.get_by_id(uuid.uuid4()) is None

    @pytest.mark.asyncio
    async def test_update_missing_raises_row_not_found(self, services):
        with pytest.raises(RowNotFound):
            await services.rooms.update_by_id(uuid.uuid4(), {"floor": 1})

    @pytest.mark.asyncio
    async def test_update_rejects_invalid_values(self, services, room):
        with pytest.raises(ValidationError):
            await services.rooms.update_by_id(room["id"], {"status": "on_fire"})
        with pytest.raises(ValidationError):
            await services.rooms.update_by_id(room["id"], {})

    @pytest.mark.asyncio
    async def test_delete_missing_does_not_raise(self, services):
        await services.rooms.delete_by_id(uuid.uuid4())

    @pytest.mark.asyncio
    async def test_list_filters_and_pages(self, services, prop):
        for i, (room_type, rate) in enumerate(
            [("single", "80"), ("double", "120"), ("suite", "300"), ("double", "140"), ("single", "90")]
        ):
            await services.rooms.create({
                "property_id": prop["id"], "number": f"{101 + i}", "room_type": room_type,
                "base_rate": rate,
            })

        page = await services.rooms.list({"property_id": prop["id"]}, page=1, limit=2)
        assert page.total_count == 5
        assert [r["number"] for r in page.rows] == ["101", "102"]

        page = await services.rooms.list({"property_id": prop["id"]}, page=3, limit=2)
        assert [r["number"] for r in page.rows] == ["105"]

        page = await services.rooms.list({"room_type": "double"})
        assert page.total_count == 2

        page = await services.rooms.list({"base_rate_min": 100, "base_rate_max": 200})
        assert sorted(r["number"] for r in page.rows) == ["102", "104"]

        page = await services.rooms.list({"room_type": ["single", "suite"]})
        assert page.total_count == 3

        page = await services.rooms.list({"search": "sui"})
        assert [r["number"] for r in page.rows] == ["103"]

    @pytest.mark.asyncio
    async def test_list_rejects_unknown_filter(self, services):
        with pytest.raises(ValidationError):
            await services.rooms.list({"colour": "blue"})

    @pytest.mark.asyncio
    async def test_guest_search_spans_name_email_phone(self, services, prop):
        await services.guests.create({"property_id": prop["id"], "first_name": "Ann", "email": "ann@example.com"})
        await services.guests.create({"property_id": prop["id"], "last_name": "Lee", "phone": "+1555000"})
        await services.guests.create({"property_id": prop["id"], "first_name": "Bob", "email": "bob@example.com"})

        assert (await services.guests.list({"search": "ANN"})).total_count == 1
        assert (await services.guests.list({"search": "555"})).total_count == 1
        assert (await services.guests.list({"search": "example.com"})).total_count == 2
