"""Async test fixtures for hotelops tests using SQLite."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from hotelops.config import HotelOpsSettings
from hotelops.models.base import Base
from hotelops.retry import RetryExecutor, RetryPolicy
from hotelops.services import build_services
from hotelops.store import SQLStore
from hotelops.triggers import TriggerEngine, register_hotel_rules

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


class Clock:
    """Settable clock shared by the trigger engine and the services."""

    def __init__(self, now: datetime = NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


class RecordingSleep:
    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"


@pytest_asyncio.fixture
async def engine():
    eng = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False, poolclass=StaticPool
    )
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def clock():
    return Clock()


@pytest.fixture
def triggers(clock):
    return register_hotel_rules(TriggerEngine(clock=clock))


@pytest.fixture
def store(session_factory, triggers):
    return SQLStore(session_factory, triggers=triggers)


@pytest.fixture
def sleep():
    return RecordingSleep()


@pytest.fixture
def retry(sleep):
    return RetryExecutor(RetryPolicy(max_attempts=3, base_delay_ms=500), sleep=sleep)


@pytest.fixture
def settings():
    return HotelOpsSettings(_env_file=None, sweep_worker_enabled=False)


@pytest.fixture
def services(settings, store, retry, clock):
    return build_services(settings, store, retry, clock=clock)


@pytest_asyncio.fixture
async def prop(services):
    return await services.properties.create({"name": "Grand Hotel", "code": "GRH"})


@pytest_asyncio.fixture
async def room(services, prop):
    return await services.rooms.create(
        {"property_id": prop["id"], "number": "101", "status": "occupied", "base_rate": "120.00"}
    )


async def add_housekeeper(services, prop, first_name, created_at, **extra):
    """Staff member with a fixed created_at so round-robin ties are deterministic."""
    return (
        await services.store.insert(
            "staff",
            {
                "property_id": prop["id"],
                "first_name": first_name,
                "role": "housekeeping",
                "created_at": created_at,
                **extra,
            },
        )
    ).value[0]


@pytest_asyncio.fixture
async def client(services):
    """HTTPX async test client against the hotelops app."""
    from hotelops.app import app
    from hotelops.tenant.deps import get_services

    app.dependency_overrides[get_services] = lambda: services

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c

    app.dependency_overrides.clear()
