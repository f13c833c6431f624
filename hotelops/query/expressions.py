"""Store dialect builders used by ``apply_filters``.

An ``ExpressionBuilder`` knows how to add one condition, or a disjunction of
conditions, to a query object of its store. Call sites only ever deal with
``FilterConfig``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, Protocol, Sequence, TypeVar

from sqlalchemy import ARRAY, Select, Table, or_
from sqlalchemy.sql.elements import ColumnElement

from ..errors import ValidationError
from .coerce import coerce_value
from .filters import FilterCondition

Q = TypeVar("Q")


class ExpressionBuilder(Protocol, Generic[Q]):
    def apply_condition(self, query: Q, condition: FilterCondition) -> Q: ...

    def apply_any(self, query: Q, conditions: Sequence[FilterCondition]) -> Q: ...


# ---------------------------------------------------------------------------
# SQLAlchemy
# ---------------------------------------------------------------------------


class SQLAlchemyExpressionBuilder:
    """Builds SQLAlchemy predicates for columns of one table."""

    def __init__(self, table: Table):
        self.table = table

    def predicate(self, condition: FilterCondition) -> ColumnElement[bool]:
        if condition.field not in self.table.c:
            raise ValidationError(
                f"Unknown filter field {condition.field!r} for {self.table.name}"
            )
        column = self.table.c[condition.field]
        op = condition.operator
        value = condition.value

        if op in ("like", "ilike"):
            pattern = str(value).replace("*", "%")
            return column.like(pattern) if op == "like" else column.ilike(pattern)
        if op == "is":
            return column.is_(value)

        is_array = isinstance(column.type, ARRAY)
        if op in ("contains", "contained") and is_array:
            items = list(value) if isinstance(value, (list, tuple)) else [value]
            return column.contains(items) if op == "contains" else column.contained_by(items)
        if op == "contains":
            # Scalar column: substring match.
            return column.contains(str(value), autoescape=True)

        value = coerce_value(column, value)
        if op in ("in", "contained"):
            items = value if isinstance(value, list) else [value]
            return column.in_(items)
        if op == "eq":
            return column == value
        if op == "neq":
            return column != value
        if op == "gt":
            return column > value
        if op == "gte":
            return column >= value
        if op == "lt":
            return column < value
        if op == "lte":
            return column <= value
        raise ValidationError(f"Unsupported filter operator: {op!r}")

    def apply_condition(self, query: Select, condition: FilterCondition) -> Select:
        return query.where(self.predicate(condition))

    def apply_any(self, query: Select, conditions: Sequence[FilterCondition]) -> Select:
        return query.where(or_(*(self.predicate(c) for c in conditions)))


# ---------------------------------------------------------------------------
# PostgREST query strings
# ---------------------------------------------------------------------------

# Operator names that differ in PostgREST syntax.
_POSTGREST_OPERATORS = {"contains": "cs", "contained": "cd"}


def format_filter_value(value: Any) -> str:
    """Serialize a value for a PostgREST filter expression."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        if "*" in value:
            return value.replace("*", "%")
        return value
    if isinstance(value, (list, tuple, set)):
        return "(" + ",".join(format_filter_value(v) for v in value) + ")"
    return str(value)


def _format_operand(operator: str, value: Any) -> str:
    if operator in ("contains", "contained"):
        items = value if isinstance(value, (list, tuple)) else [value]
        return "{" + ",".join(format_filter_value(v) for v in items) + "}"
    if operator == "in" and not isinstance(value, (list, tuple, set)):
        value = [value]
    return format_filter_value(value)


def build_filter_expression(condition: FilterCondition) -> str:
    op = _POSTGREST_OPERATORS.get(condition.operator, condition.operator)
    return f"{condition.field}.{op}.{_format_operand(condition.operator, condition.value)}"


def build_or_expression(conditions: Sequence[FilterCondition]) -> str:
    """``field.op.value`` terms joined by commas."""
    return ",".join(build_filter_expression(c) for c in conditions)


@dataclass(frozen=True)
class PostgrestQuery:
    """Immutable list of query-string parameters for a PostgREST request."""

    params: tuple[tuple[str, str], ...] = ()

    def with_param(self, key: str, value: str) -> "PostgrestQuery":
        return PostgrestQuery(params=self.params + ((key, value),))


class PostgrestExpressionBuilder:
    """Builds PostgREST ``column=op.value`` and ``or=(...)`` parameters."""

    def apply_condition(self, query: PostgrestQuery, condition: FilterCondition) -> PostgrestQuery:
        op = _POSTGREST_OPERATORS.get(condition.operator, condition.operator)
        operand = _format_operand(condition.operator, condition.value)
        return query.with_param(condition.field, f"{op}.{operand}")

    def apply_any(
        self, query: PostgrestQuery, conditions: Sequence[FilterCondition]
    ) -> PostgrestQuery:
        return query.with_param("or", f"({build_or_expression(conditions)})")
