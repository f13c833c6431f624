"""Backing-store protocol shared by the SQL and REST stores."""

from __future__ import annotations

from typing import Any, Protocol, Sequence

from ..query.filters import FilterCondition, FilterConfig
from ..query.pagination import PageRange
from ..results import Result

Row = dict[str, Any]
# (column, ascending)
Order = Sequence[tuple[str, bool]]


class Store(Protocol):
    """Row-level access to named tables.

    Every method reports store failures as ``Err`` rather than raising.
    ``select_one`` reports a missing row as ``Err`` with code ``ZERO_ROWS``.
    """

    async def select(
        self,
        table: str,
        *,
        filters: Sequence[FilterConfig] = (),
        page: PageRange | None = None,
        order: Order = (),
        count: bool = False,
    ) -> Result[list[Row]]: ...

    async def select_one(
        self, table: str, conditions: Sequence[FilterCondition]
    ) -> Result[Row]: ...

    async def insert(self, table: str, payload: Row) -> Result[list[Row]]: ...

    async def update(
        self, table: str, conditions: Sequence[FilterCondition], payload: Row
    ) -> Result[list[Row]]: ...

    async def delete(
        self, table: str, conditions: Sequence[FilterCondition]
    ) -> Result[list[Row]]: ...

    async def rpc(self, name: str, params: dict[str, Any] | None = None) -> Result[Any]: ...


def id_condition(row_id: Any) -> list[FilterCondition]:
    return [FilterCondition("id", "eq", row_id)]
