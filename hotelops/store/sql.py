"""SQLAlchemy-backed store.

Each call runs in its own session and transaction. Writes go through a
``TriggerContext`` so the registered row rules run inside the same
transaction as the write that fired them.
"""

from __future__ import annotations

import logging
from typing import Any, Sequence

from sqlalchemy import MetaData, Table, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..errors import ZERO_ROWS, StoreError, TransientStoreError, ValidationError
from ..models import Base
from ..query.coerce import coerce_row
from ..query.expressions import SQLAlchemyExpressionBuilder
from ..query.filters import FilterCondition, FilterConfig, apply_filters
from ..query.pagination import PageRange
from ..results import Err, Ok, Result
from ..triggers.engine import TriggerContext, TriggerEngine
from ..triggers.procedures import PROCEDURES, Procedure
from .base import Order, Row

logger = logging.getLogger(__name__)


def _store_error(exc: SQLAlchemyError) -> TransientStoreError:
    orig = getattr(exc, "orig", None)
    code = type(orig).__name__ if orig is not None else type(exc).__name__
    return TransientStoreError(str(exc).splitlines()[0], code=code, details=exc)


class SQLStore:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        triggers: TriggerEngine | None = None,
        procedures: dict[str, Procedure] | None = None,
        metadata: MetaData = Base.metadata,
    ):
        self._session_factory = session_factory
        self.triggers = triggers
        self.procedures = dict(PROCEDURES if procedures is None else procedures)
        self.metadata = metadata

    def table(self, name: str) -> Table:
        table = self.metadata.tables.get(name)
        if table is None:
            raise ValidationError(f"Unknown table: {name!r}")
        return table

    def _where(self, table: Table, conditions: Sequence[FilterCondition]) -> list:
        builder = SQLAlchemyExpressionBuilder(table)
        return [builder.predicate(c) for c in conditions]

    async def select(
        self,
        table: str,
        *,
        filters: Sequence[FilterConfig] = (),
        page: PageRange | None = None,
        order: Order = (),
        count: bool = False,
    ) -> Result[list[Row]]:
        tbl = self.table(table)
        builder = SQLAlchemyExpressionBuilder(tbl)
        stmt = select(tbl)
        for config in filters:
            stmt = apply_filters(stmt, config, builder)

        try:
            async with self._session_factory() as session:
                total = None
                if count:
                    count_stmt = select(func.count()).select_from(stmt.subquery())
                    total = (await session.execute(count_stmt)).scalar() or 0

                for column, ascending in order:
                    col = tbl.c[column]
                    stmt = stmt.order_by(col.asc() if ascending else col.desc())
                if page is not None:
                    stmt = stmt.offset(page.start).limit(page.size)
                result = await session.execute(stmt)
                rows = [dict(row) for row in result.mappings().all()]
        except SQLAlchemyError as exc:
            return Err(_store_error(exc))
        return Ok(rows, count=total)

    async def select_one(self, table: str, conditions: Sequence[FilterCondition]) -> Result[Row]:
        tbl = self.table(table)
        stmt = select(tbl).where(*self._where(tbl, conditions)).limit(2)
        try:
            async with self._session_factory() as session:
                rows = (await session.execute(stmt)).mappings().all()
        except SQLAlchemyError as exc:
            return Err(_store_error(exc))
        if len(rows) != 1:
            return Err(StoreError(
                f"Expected exactly one row from {table}, got {len(rows)}",
                code=ZERO_ROWS,
            ))
        return Ok(dict(rows[0]))

    async def insert(self, table: str, payload: Row) -> Result[list[Row]]:
        tbl = self.table(table)
        values = coerce_row(tbl, payload)
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    ctx = TriggerContext(session, self.triggers)
                    row = await ctx.insert(tbl, values)
        except SQLAlchemyError as exc:
            return Err(_store_error(exc))
        return Ok([row])

    async def update(
        self, table: str, conditions: Sequence[FilterCondition], payload: Row
    ) -> Result[list[Row]]:
        tbl = self.table(table)
        where = self._where(tbl, conditions)
        values = coerce_row(tbl, payload)
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    ctx = TriggerContext(session, self.triggers)
                    rows = await ctx.update(tbl, where, values)
        except SQLAlchemyError as exc:
            return Err(_store_error(exc))
        return Ok(rows)

    async def delete(self, table: str, conditions: Sequence[FilterCondition]) -> Result[list[Row]]:
        tbl = self.table(table)
        where = self._where(tbl, conditions)
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    rows = await TriggerContext(session, self.triggers).delete(tbl, where)
        except SQLAlchemyError as exc:
            return Err(_store_error(exc))
        return Ok(rows)

    async def rpc(self, name: str, params: dict[str, Any] | None = None) -> Result[Any]:
        procedure = self.procedures.get(name)
        if procedure is None:
            return Err(StoreError(f"Unknown procedure: {name}", code="PGRST202"))
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    value = await procedure(TriggerContext(session, self.triggers), params or {})
        except SQLAlchemyError as exc:
            return Err(_store_error(exc))
        return Ok(value)
