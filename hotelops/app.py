"""FastAPI application for hotel operations."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from .config import settings
from .errors import IntegrityError, RetryExhausted, RowNotFound, StoreError, ValidationError
from .services import build_services
from .store import build_store
from .worker import OverdueSweepWorker

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Auto-create tables for SQLite (local dev)
    if settings.store_backend == "sql" and "sqlite" in settings.database_url:
        from .database import create_all
        await create_all()

    store = build_store(settings)
    app.state.services = build_services(settings, store)
    worker = OverdueSweepWorker(
        store,
        interval_seconds=settings.sweep_interval_seconds,
        enabled=settings.sweep_worker_enabled,
    )
    worker.start()
    try:
        yield
    finally:
        await worker.stop()
        close = getattr(store, "close", None)
        if close is not None:
            await close()


app = FastAPI(title=settings.app_title, lifespan=lifespan)


def _error(status_code: int, exc, **extra) -> JSONResponse:
    content = {"detail": exc.message, "code": exc.code, **extra}
    return JSONResponse(status_code=status_code, content=jsonable_encoder(content))


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return _error(422, exc, errors=exc.errors)


@app.exception_handler(IntegrityError)
async def integrity_error_handler(request: Request, exc: IntegrityError):
    if isinstance(exc, RowNotFound):
        return _error(404, exc)
    return _error(409, exc)


@app.exception_handler(RetryExhausted)
async def retry_exhausted_handler(request: Request, exc: RetryExhausted):
    logger.error("%s %s: %s (cause: %s)", request.method, request.url.path, exc, exc.cause)
    return _error(503, exc, attempts=exc.attempts)


@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError):
    logger.error("%s %s: store error %s", request.method, request.url.path, exc.code)
    return _error(503, exc)


# Import and register routers
from .routers import health, operations, properties, resources  # noqa: E402

app.include_router(health.router)
app.include_router(properties.router)
# Action routes must precede the generic /{resource}/{row_id} routes.
app.include_router(operations.router)
app.include_router(resources.router)
