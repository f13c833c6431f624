"""Coerce wire values (JSON/query-string) into Python types a column accepts."""

from __future__ import annotations

import uuid
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation

from sqlalchemy import Boolean, Column, Date, DateTime, Numeric, String, Uuid

from ..errors import ValidationError


def _to_utc(value: datetime) -> datetime:
    # SQLite keeps the wall-clock time and drops the offset.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _coerce_datetime(value: object) -> datetime | None:
    if isinstance(value, datetime):
        return _to_utc(value)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    if isinstance(value, str):
        raw = value.strip()
        if not raw:
            return None
        return _to_utc(datetime.fromisoformat(raw.replace("Z", "+00:00")))
    raise ValueError(f"not a datetime: {value!r}")


def _coerce_date(value: object) -> date | None:
    """Dates must be real ``date`` objects; SQLite and asyncpg both reject strings."""
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        raw = value.strip()
        if not raw:
            return None
        try:
            return date.fromisoformat(raw[:10])
        except ValueError:
            return datetime.fromisoformat(raw.replace("Z", "+00:00")).date()
    raise ValueError(f"not a date: {value!r}")


def coerce_value(column: Column, value: object) -> object:
    """Coerce a single value for ``column``; lists are coerced element-wise."""
    if value is None:
        return None
    if isinstance(value, (list, tuple, set)):
        return [coerce_value(column, v) for v in value]

    col_type = column.type
    try:
        if isinstance(col_type, DateTime):
            return _coerce_datetime(value)
        if isinstance(col_type, Date):
            return _coerce_date(value)
        if isinstance(col_type, Uuid) and not isinstance(value, uuid.UUID):
            return uuid.UUID(str(value))
        if isinstance(col_type, Boolean) and isinstance(value, str):
            return value.strip().lower() in ("1", "true", "yes", "on")
        if isinstance(col_type, Numeric) and isinstance(value, str):
            return Decimal(value)
        if isinstance(col_type, String) and isinstance(value, (int, float)) and not isinstance(value, bool):
            # Query strings like ?number=101 arrive as numbers.
            return str(value)
    except (TypeError, ValueError, InvalidOperation) as exc:
        raise ValidationError(f"Invalid value for {column.name}: {value!r}") from exc
    return value


def coerce_row(table, payload: dict) -> dict:
    """Coerce every known column in ``payload``; unknown keys are rejected."""
    unknown = [key for key in payload if key not in table.c]
    if unknown:
        raise ValidationError(f"Unknown columns for {table.name}: {', '.join(sorted(unknown))}")
    return {key: coerce_value(table.c[key], value) for key, value in payload.items()}


def as_utc(value: object) -> datetime | None:
    """Aware UTC datetime from a stored value; naive values are taken as UTC."""
    if value is None:
        return None
    return _coerce_datetime(value)
