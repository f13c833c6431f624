"""Query composition: filter conditions, store dialect builders, pagination."""

from .filters import (
    OPERATORS,
    FilterCondition,
    FilterConfig,
    SpecialFilters,
    apply_filters,
    build_filter_conditions,
    create_text_search_filter,
    parse_filter_params,
    split_special_filters,
)
from .expressions import (
    ExpressionBuilder,
    PostgrestExpressionBuilder,
    PostgrestQuery,
    SQLAlchemyExpressionBuilder,
    build_or_expression,
    format_filter_value,
)
from .pagination import (
    PageRange,
    PaginationMeta,
    calculate_pagination_meta,
    create_paginated_response,
    extract_pagination_params,
    generate_pagination_links,
    pagination_to_range,
)

__all__ = [
    "OPERATORS",
    "FilterCondition",
    "FilterConfig",
    "SpecialFilters",
    "apply_filters",
    "build_filter_conditions",
    "create_text_search_filter",
    "parse_filter_params",
    "split_special_filters",
    "ExpressionBuilder",
    "PostgrestExpressionBuilder",
    "PostgrestQuery",
    "SQLAlchemyExpressionBuilder",
    "build_or_expression",
    "format_filter_value",
    "PageRange",
    "PaginationMeta",
    "calculate_pagination_meta",
    "create_paginated_response",
    "extract_pagination_params",
    "generate_pagination_links",
    "pagination_to_range",
]
