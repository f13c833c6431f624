"""Row-level trigger engine.

Rules are registered per (table, event) and run synchronously inside the
transaction of the write that fired them, so a rule's side effects commit or
roll back together with that write. Writes issued by a rule through the
``TriggerContext`` fire their own table's rules in turn.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Iterable, Sequence

from sqlalchemy import Table, delete, insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql.elements import ColumnElement

from ..errors import StoreError

logger = logging.getLogger(__name__)

TRIGGER_EVENTS = ("insert", "update")
MAX_TRIGGER_DEPTH = 8

Row = dict[str, Any]
Rule = Callable[["TriggerContext", "Row | None", Row], Awaitable[None]]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TriggerEngine:
    """Registry of row rules plus the clock they read."""

    def __init__(self, clock: Callable[[], datetime] = utcnow):
        self.clock = clock
        self._rules: dict[tuple[str, str], list[Rule]] = defaultdict(list)

    def register(self, table: str, events: Iterable[str], rule: Rule) -> None:
        for event in events:
            if event not in TRIGGER_EVENTS:
                raise ValueError(f"Unknown trigger event: {event!r}")
            self._rules[(table, event)].append(rule)

    def on(self, table: str, *events: str) -> Callable[[Rule], Rule]:
        """Decorator form of ``register``."""

        def decorator(rule: Rule) -> Rule:
            self.register(table, events, rule)
            return rule

        return decorator

    def rules_for(self, table: str, event: str) -> list[Rule]:
        return list(self._rules.get((table, event), ()))


class TriggerContext:
    """Write helpers bound to one session/transaction that fire rules."""

    def __init__(self, session: AsyncSession, engine: TriggerEngine | None, depth: int = 0):
        self.session = session
        self.engine = engine
        self.depth = depth

    def now(self) -> datetime:
        return self.engine.clock() if self.engine else utcnow()

    async def fire(self, table: Table, event: str, old: Row | None, new: Row) -> None:
        if self.engine is None:
            return
        rules = self.engine.rules_for(table.name, event)
        if not rules:
            return
        if self.depth >= MAX_TRIGGER_DEPTH:
            raise StoreError(
                f"Trigger recursion limit reached on {table.name}", "TRIGGER_RECURSION"
            )
        nested = TriggerContext(self.session, self.engine, self.depth + 1)
        for rule in rules:
            await rule(nested, old, new)

    async def fetch(self, stmt) -> list[Row]:
        result = await self.session.execute(stmt)
        return [dict(row) for row in result.mappings().all()]

    async def insert(self, table: Table, values: Row, *, fire: bool = True) -> Row:
        result = await self.session.execute(
            insert(table).values(**values).returning(*table.c)
        )
        row = dict(result.mappings().one())
        if fire:
            await self.fire(table, "insert", None, row)
        return row

    async def update(
        self,
        table: Table,
        where: Sequence[ColumnElement[bool]],
        values: Row,
    ) -> list[Row]:
        old_rows = await self.fetch(select(table).where(*where).with_for_update())
        if not old_rows:
            return []
        result = await self.session.execute(
            update(table).where(*where).values(**values).returning(*table.c)
        )
        new_rows = [dict(row) for row in result.mappings().all()]
        old_by_id = {row["id"]: row for row in old_rows}
        for row in new_rows:
            await self.fire(table, "update", old_by_id.get(row["id"]), row)
        return new_rows

    async def delete(self, table: Table, where: Sequence[ColumnElement[bool]]) -> list[Row]:
        result = await self.session.execute(delete(table).where(*where).returning(*table.c))
        return [dict(row) for row in result.mappings().all()]


def status_changed(old: Row | None, new: Row) -> bool:
    return old is None or old.get("status") != new.get("status")
