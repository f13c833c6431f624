"""Filter conditions: building, applying and parsing from request params.

The engine is store-agnostic. Applying a condition set to a concrete query is
delegated to an ``ExpressionBuilder`` (see ``expressions``), so the same
``FilterConfig`` drives a SQLAlchemy ``Select`` or a PostgREST query string.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Iterable, Mapping, TypeVar

from ..errors import ValidationError

if TYPE_CHECKING:
    from .expressions import ExpressionBuilder

Q = TypeVar("Q")

OPERATORS = frozenset({
    "eq", "neq", "gt", "gte", "lt", "lte",
    "like", "ilike", "is", "in", "contains", "contained",
})

# Params that control paging/sorting and never become filters.
RESERVED_PARAMS = frozenset({"page", "limit", "sort", "order"})

_NUMBER_RE = re.compile(r"^-?\d+(\.\d+)?$")
_TIMESTAMP_RE = re.compile(
    r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(\.\d+)?(Z|[+-]\d{2}:\d{2})?$"
)


@dataclass(frozen=True)
class FilterCondition:
    field: str
    operator: str
    value: Any

    def __post_init__(self) -> None:
        if self.operator not in OPERATORS:
            raise ValidationError(f"Unsupported filter operator: {self.operator!r}")


@dataclass(frozen=True)
class FilterConfig:
    """A condition set joined with AND, or with OR when ``match_any`` is set."""

    conditions: tuple[FilterCondition, ...] = ()
    match_any: bool = False

    def __post_init__(self) -> None:
        # Accept any iterable but store a tuple so configs stay hashable/immutable.
        object.__setattr__(self, "conditions", tuple(self.conditions))

    def __bool__(self) -> bool:
        return bool(self.conditions)


def _is_empty(value: object) -> bool:
    return value is None or value == ""


def build_filter_conditions(
    filters: Mapping[str, Any],
    default_operator: str = "eq",
) -> list[FilterCondition]:
    """Turn a field -> value mapping into conditions, dropping None and "" values."""
    return [
        FilterCondition(field=key, operator=default_operator, value=value)
        for key, value in filters.items()
        if not _is_empty(value)
    ]


def apply_filters(query: Q, config: FilterConfig, builder: "ExpressionBuilder[Q]") -> Q:
    """Apply a filter config to ``query`` and return the new query.

    Zero conditions return ``query`` unchanged. OR mode with a single
    condition behaves exactly like AND mode.
    """
    conditions = config.conditions
    if not conditions:
        return query

    if config.match_any and len(conditions) > 1:
        return builder.apply_any(query, conditions)

    for condition in conditions:
        query = builder.apply_condition(query, condition)
    return query


def create_text_search_filter(search_term: str | None, search_fields: Iterable[str]) -> FilterConfig:
    """OR together case-insensitive substring matches across ``search_fields``."""
    fields = list(search_fields)
    if not search_term or not fields:
        return FilterConfig()
    return FilterConfig(
        conditions=[FilterCondition(f, "ilike", f"%{search_term}%") for f in fields],
        match_any=True,
    )


# ---------------------------------------------------------------------------
# Query-string parsing
# ---------------------------------------------------------------------------


def _normalize_timestamp(raw: str) -> str:
    parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc).isoformat()


def parse_filter_value(value: Any, operator: str = "eq") -> Any:
    """Infer a typed value from a raw query-string value."""
    if operator == "in" and isinstance(value, str):
        return [parse_filter_value(part, "eq") for part in value.split(",")]

    if not isinstance(value, str):
        return value
    if value == "true":
        return True
    if value == "false":
        return False
    if value == "null":
        return None
    if _NUMBER_RE.match(value):
        return float(value) if "." in value else int(value)
    if _TIMESTAMP_RE.match(value):
        try:
            return _normalize_timestamp(value)
        except ValueError:
            return value
    return value


def _matching_field(key: str, allowed_fields: Iterable[str]) -> str | None:
    # Longest match wins so "room_type" beats "room" for "room_type_in".
    best = None
    for name in allowed_fields:
        if key == name or key.startswith(f"{name}_"):
            if best is None or len(name) > len(best):
                best = name
    return best


def parse_filter_params(
    params: Mapping[str, Any],
    allowed_fields: Iterable[str],
) -> dict[str, Any]:
    """Extract typed filters from flat string params.

    Keys are kept as given (``status``, ``due_by_from``, ``status_in``); keys
    that do not start with an allowed field, and paging/sort keys, are dropped.
    """
    allowed = list(allowed_fields)
    filters: dict[str, Any] = {}
    for key, value in params.items():
        if key in RESERVED_PARAMS:
            continue
        base = _matching_field(key, allowed)
        if base is None:
            continue
        suffix = key[len(base) + 1:] if key != base else ""
        operator = "in" if suffix == "in" else "eq"
        filters[key] = parse_filter_value(value, operator)
    return filters


# ---------------------------------------------------------------------------
# Special-key reduction
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SpecialFilters:
    """Result of reducing caller filters: extra configs plus generic leftovers."""

    configs: tuple[FilterConfig, ...] = ()
    remaining: dict[str, Any] = field(default_factory=dict)


def split_special_filters(
    filters: Mapping[str, Any] | None,
    *,
    columns: Iterable[str],
    search_fields: Iterable[str] = (),
    date_range_fields: Iterable[str] = (),
    array_fields: Iterable[str] = (),
) -> SpecialFilters:
    """Consume special keys and return what they translate to.

    Never mutates ``filters``. Handled keys:

    - ``search``: OR of ``ilike`` over ``search_fields``
    - ``<col>_from`` / ``<col>_to`` for ``date_range_fields``: ``gte`` / ``lte``
    - ``<col>_min`` / ``<col>_max`` for any known column: ``gte`` / ``lte``
    - ``<col>`` for ``array_fields``: ``contains``
    - ``<col>_<op>`` for any known column and operator
    - list values on a plain column: ``in``

    Everything else is returned in ``remaining`` for equality matching.
    """
    if not filters:
        return SpecialFilters()

    columns = set(columns)
    date_fields = set(date_range_fields)
    array_cols = set(array_fields)
    search_cols = list(search_fields)

    configs: list[FilterConfig] = []
    conditions: list[FilterCondition] = []
    remaining: dict[str, Any] = {}

    for key, value in filters.items():
        if _is_empty(value):
            continue

        if key == "search":
            search = create_text_search_filter(str(value), search_cols)
            if search:
                configs.append(search)
            continue

        if key.endswith("_from") and key[:-5] in date_fields:
            conditions.append(FilterCondition(key[:-5], "gte", value))
            continue
        if key.endswith("_to") and key[:-3] in date_fields:
            conditions.append(FilterCondition(key[:-3], "lte", value))
            continue

        if key.endswith("_min") and key[:-4] in columns:
            conditions.append(FilterCondition(key[:-4], "gte", value))
            continue
        if key.endswith("_max") and key[:-4] in columns:
            conditions.append(FilterCondition(key[:-4], "lte", value))
            continue

        if key in array_cols:
            items = list(value) if isinstance(value, (list, tuple)) else [value]
            conditions.append(FilterCondition(key, "contains", items))
            continue

        if key in columns:
            if isinstance(value, (list, tuple, set)):
                conditions.append(FilterCondition(key, "in", list(value)))
            else:
                remaining[key] = value
            continue

        base, _, op = key.rpartition("_")
        if base in columns and op in OPERATORS:
            if op == "in" and not isinstance(value, (list, tuple)):
                value = [value]
            conditions.append(FilterCondition(base, op, value))
            continue

        raise ValidationError(f"Unknown filter field: {key!r}")

    if conditions:
        configs.insert(0, FilterConfig(conditions=conditions))
    return SpecialFilters(configs=tuple(configs), remaining=remaining)
