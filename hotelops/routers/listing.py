"""Query-string parsing shared by list endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import Request

from ..config import settings
from ..query.filters import parse_filter_params
from ..query.pagination import create_paginated_response, extract_pagination_params
from ..services import ResourceService


async def list_response(
    request: Request,
    service: ResourceService,
    forced: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Run a filtered, paginated list and shape it as ``{data, pagination}``."""
    params = dict(request.query_params)
    page, limit = extract_pagination_params(
        params, default_limit=settings.default_page_size, max_limit=settings.max_page_size
    )
    filters = parse_filter_params(params, [*service.columns, "search"])
    filters.update(forced or {})

    order = None
    sort = params.get("sort")
    if sort in service.columns:
        order = ((sort, params.get("order", "asc").lower() != "desc"),)

    result = await service.list(filters, page=page, limit=limit, order=order)
    return create_paginated_response(result.rows, page, limit, result.total_count)
