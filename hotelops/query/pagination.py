"""Page/limit arithmetic and paginated response helpers."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Mapping
from urllib.parse import quote


@dataclass(frozen=True)
class PageRange:
    """Inclusive zero-based row range."""

    start: int
    end: int

    @property
    def size(self) -> int:
        return self.end - self.start + 1


@dataclass(frozen=True)
class PaginationMeta:
    current_page: int
    page_size: int
    total_items: int
    total_pages: int
    has_prev_page: bool
    has_next_page: bool


def pagination_to_range(page: int, limit: int) -> PageRange:
    """Convert a 1-based page and page size into an inclusive row range.

    Callers guarantee ``page >= 1`` and ``limit >= 1``; nothing is validated here.
    """
    start = (page - 1) * limit
    return PageRange(start=start, end=start + limit - 1)


def calculate_pagination_meta(page: int, limit: int, total: int) -> PaginationMeta:
    total_pages = math.ceil(total / limit) if limit else 0
    return PaginationMeta(
        current_page=page,
        page_size=limit,
        total_items=total,
        total_pages=total_pages,
        has_prev_page=page > 1,
        has_next_page=page < total_pages,
    )


def create_paginated_response(rows: list, page: int, limit: int, total: int) -> dict[str, Any]:
    meta = calculate_pagination_meta(page, limit, total)
    return {
        "data": rows,
        "pagination": {
            "current_page": meta.current_page,
            "page_size": meta.page_size,
            "total_items": meta.total_items,
            "total_pages": meta.total_pages,
            "has_prev_page": meta.has_prev_page,
            "has_next_page": meta.has_next_page,
        },
    }


def _to_int(value: object) -> int | None:
    try:
        return int(str(value))
    except (TypeError, ValueError):
        return None


def extract_pagination_params(
    params: Mapping[str, Any],
    default_limit: int = 20,
    max_limit: int = 100,
) -> tuple[int, int]:
    """Read ``page``/``limit`` from request params, clamped to sane bounds."""
    page = max(1, _to_int(params.get("page")) or 1)
    limit = _to_int(params.get("limit")) or default_limit
    limit = min(max_limit, max(1, limit))
    return page, limit


def generate_pagination_links(
    base_url: str,
    page: int,
    limit: int,
    total: int,
    query_params: Mapping[str, Any] | None = None,
) -> dict[str, str | None]:
    total_pages = math.ceil(total / limit) if limit else 0
    other = "&".join(
        f"{key}={quote(str(value), safe='')}"
        for key, value in (query_params or {}).items()
        if key not in ("page", "limit")
    )
    suffix = f"&{other}" if other else ""

    def link(p: int) -> str:
        return f"{base_url}?page={p}&limit={limit}{suffix}"

    return {
        "first": link(1),
        "last": link(max(total_pages, 1)),
        "prev": link(page - 1) if page > 1 else None,
        "next": link(page + 1) if page < total_pages else None,
    }
