"""Generic filtered CRUD over one store table."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Iterable, Mapping

import pydantic

from ..errors import NoDataReturned, RowNotFound, ValidationError
from ..models import Base
from ..query.filters import (
    FilterCondition,
    FilterConfig,
    build_filter_conditions,
    split_special_filters,
)
from ..query.pagination import PageRange, pagination_to_range
from ..results import Err, Ok, Result
from ..retry import RetryExecutor
from ..store.base import Order, Row, Store, id_condition

logger = logging.getLogger(__name__)


@dataclass
class Page:
    rows: list[Row] = field(default_factory=list)
    total_count: int = 0


def validate_payload(
    schema: type[pydantic.BaseModel] | None,
    payload: Mapping[str, Any],
    *,
    partial: bool = False,
) -> dict[str, Any]:
    """Run ``payload`` through ``schema``; pydantic errors become ``ValidationError``."""
    if schema is None:
        return dict(payload)
    try:
        model = schema.model_validate(dict(payload))
    except pydantic.ValidationError as exc:
        raise ValidationError(
            f"Invalid {schema.__name__}: {exc.error_count()} error(s)",
            errors=exc.errors(include_url=False, include_context=False),
        ) from exc
    if partial:
        return model.model_dump(exclude_unset=True)
    return model.model_dump(exclude_none=True)


class ResourceService:
    """List/get/create/update/delete for one table.

    Mutations run through the retry executor. Reads call the store once
    unless ``retry_reads`` is set.
    """

    def __init__(
        self,
        store: Store,
        table: str,
        retry: RetryExecutor,
        *,
        create_schema: type[pydantic.BaseModel] | None = None,
        update_schema: type[pydantic.BaseModel] | None = None,
        search_fields: Iterable[str] = (),
        date_range_fields: Iterable[str] = (),
        array_fields: Iterable[str] = (),
        references: Mapping[str, str] | None = None,
        default_order: Order = (("created_at", False),),
        retry_reads: bool = False,
    ):
        if table not in Base.metadata.tables:
            raise ValueError(f"Unknown table: {table!r}")
        self.store = store
        self.table = table
        self.retry = retry
        self.create_schema = create_schema
        self.update_schema = update_schema
        self.search_fields = tuple(search_fields)
        self.date_range_fields = tuple(date_range_fields)
        self.array_fields = tuple(array_fields)
        # Foreign-key column -> table whose row must share this row's property.
        self.references = dict(references or {})
        self.default_order = tuple(default_order)
        self.retry_reads = retry_reads

    @property
    def columns(self) -> list[str]:
        return list(Base.metadata.tables[self.table].c.keys())

    async def _read(self, op: Callable[[], Awaitable[Result[Any]]]) -> Any:
        if self.retry_reads:
            return (await self.retry.execute(op)).value
        result = await op()
        if isinstance(result, Err):
            raise result.error
        return result.value

    async def _write(self, op: Callable[[], Awaitable[Result[Any]]]) -> Any:
        return (await self.retry.execute(op)).value

    def build_filters(self, filters: Mapping[str, Any] | None) -> list[FilterConfig]:
        special = split_special_filters(
            filters,
            columns=self.columns,
            search_fields=self.search_fields,
            date_range_fields=self.date_range_fields,
            array_fields=self.array_fields,
        )
        configs = list(special.configs)
        generic = build_filter_conditions(special.remaining)
        if generic:
            configs.append(FilterConfig(conditions=generic))
        return configs

    async def create(self, payload: Mapping[str, Any]) -> Row:
        data = validate_payload(self.create_schema, payload)
        await self.check_references(data.get("property_id"), data)
        return await self._insert(data)

    async def check_reference(self, property_id: Any, table: str, row_id: Any, column: str) -> None:
        """Reject ``row_id`` unless it names a ``table`` row owned by ``property_id``."""
        config = FilterConfig(
            conditions=[
                FilterCondition("id", "eq", row_id),
                FilterCondition("property_id", "eq", property_id),
            ]
        )
        rows = await self._read(
            lambda: self.store.select(table, filters=[config], page=PageRange(0, 0))
        )
        if not rows:
            raise ValidationError(
                f"{column} {row_id} is not a {table} row of property {property_id}",
                errors=[{"loc": [column], "msg": "Not found in this property", "type": "tenant_reference"}],
            )

    async def check_references(self, property_id: Any, data: Mapping[str, Any]) -> None:
        for column, table in self.references.items():
            if data.get(column) is not None:
                await self.check_reference(property_id, table, data[column], column)

    async def _insert(self, data: dict[str, Any]) -> Row:
        rows = await self._write(lambda: self.store.insert(self.table, data))
        if not rows:
            raise NoDataReturned(self.table)
        return rows[0]

    async def get_by_id(self, row_id: Any) -> Row | None:
        async def op() -> Result[Row | None]:
            result = await self.store.select_one(self.table, id_condition(row_id))
            if isinstance(result, Err) and result.error.is_zero_rows:
                return Ok(None)
            return result

        return await self._read(op)

    async def find(self, filters: Mapping[str, Any], order: Order | None = None) -> list[Row]:
        """Every row matching ``filters``, unpaged."""
        configs = self.build_filters(filters)
        return await self._read(
            lambda: self.store.select(
                self.table, filters=configs, order=order or self.default_order
            )
        )

    async def get_one(self, filters: Mapping[str, Any]) -> Row | None:
        """First row matching ``filters`` under the default order, or None."""
        page = await self.list(filters, page=1, limit=1)
        return page.rows[0] if page.rows else None

    async def list(
        self,
        filters: Mapping[str, Any] | None = None,
        page: int = 1,
        limit: int = 20,
        order: Order | None = None,
    ) -> Page:
        configs = self.build_filters(filters)
        page_range = pagination_to_range(page, limit)
        result = await self._read(
            lambda: self._select_with_count(configs, page_range, order or self.default_order)
        )
        rows, total = result
        return Page(rows=rows, total_count=total)

    async def _select_with_count(self, configs, page_range, order) -> Result[tuple[list[Row], int]]:
        result = await self.store.select(
            self.table, filters=configs, page=page_range, order=order, count=True
        )
        if isinstance(result, Err):
            return result
        total = result.count if result.count is not None else len(result.value)
        return Ok((result.value, total))

    async def update_by_id(self, row_id: Any, payload: Mapping[str, Any]) -> Row:
        data = validate_payload(self.update_schema, payload, partial=True)
        if not data:
            raise ValidationError("No fields to update")
        if any(data.get(column) is not None for column in self.references):
            current = await self.get_by_id(row_id)
            if current is None:
                raise RowNotFound(self.table, row_id)
            await self.check_references(current["property_id"], data)
        rows = await self._write(
            lambda: self.store.update(self.table, id_condition(row_id), data)
        )
        if not rows:
            raise RowNotFound(self.table, row_id)
        return rows[0]

    async def delete_by_id(self, row_id: Any) -> None:
        rows = await self._write(lambda: self.store.delete(self.table, id_condition(row_id)))
        if rows:
            logger.info("Deleted %s %s", self.table, row_id)

    async def rpc(self, name: str, params: Mapping[str, Any] | None = None) -> Any:
        """Call a stored procedure through the retry executor."""
        return await self._write(lambda: self.store.rpc(name, dict(params or {})))
