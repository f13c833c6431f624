"""Backing stores: SQLAlchemy (in-process triggers) and PostgREST over HTTP."""

from __future__ import annotations

from datetime import timedelta

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..config import HotelOpsSettings
from ..triggers import TriggerEngine, register_hotel_rules
from .base import Order, Row, Store, id_condition
from .rest import RestStore
from .sql import SQLStore


def build_store(
    settings: HotelOpsSettings,
    session_factory: async_sessionmaker[AsyncSession] | None = None,
) -> Store:
    """Store selected by ``settings.store_backend``."""
    if settings.store_backend == "rest":
        if not settings.rest_configured:
            raise ValueError("HOTELOPS_STORE_URL and HOTELOPS_STORE_KEY are required for the rest store")
        return RestStore(
            settings.store_url, settings.store_key, timeout=settings.store_timeout_seconds
        )
    if settings.store_backend != "sql":
        raise ValueError(f"Unknown store backend: {settings.store_backend!r}")

    if session_factory is None:
        from ..database import async_session_factory as session_factory
    triggers = register_hotel_rules(
        TriggerEngine(), housekeeping_due=timedelta(hours=settings.housekeeping_due_hours)
    )
    return SQLStore(session_factory, triggers=triggers)


__all__ = ["Order", "Row", "Store", "build_store", "id_condition", "RestStore", "SQLStore"]
