"""
lazy_paginate: lazy async sequences over paginated data sources.

    async for user in paginate(fetch_users, strategy="cursor", limit=50,
                               error_policy={"type": "throw"}):
        ...
"""

from .exceptions import PageResultError, PaginationConfigError
from .lazy import LazyCollection
from .models import (
    BreakPolicy,
    ContinuePolicy,
    CursorPaginationOptions,
    CustomPolicy,
    ErrorPolicyType,
    OffsetPaginationOptions,
    PageInfo,
    PagePaginationOptions,
    PageRequest,
    PageResult,
    PaginationHooks,
    PaginationStrategy,
    ThrowPolicy,
)
from .operators import (
    abatch,
    afilter,
    amap,
    askip,
    atake,
    count,
    every,
    find,
    first,
    for_each,
    reduce,
    some,
    to_dict,
    to_list,
    to_set,
)
from .paginator import Paginator, PaginationStats, paginate, parse_options
from .utils import setup_logging

__version__ = "0.1.0"

__all__ = [
    "paginate",
    "Paginator",
    "PaginationStats",
    "parse_options",
    "LazyCollection",
    "PageRequest",
    "PageInfo",
    "PageResult",
    "PaginationStrategy",
    "ErrorPolicyType",
    "ThrowPolicy",
    "BreakPolicy",
    "ContinuePolicy",
    "CustomPolicy",
    "PaginationHooks",
    "OffsetPaginationOptions",
    "PagePaginationOptions",
    "CursorPaginationOptions",
    "PaginationConfigError",
    "PageResultError",
    "afilter",
    "amap",
    "atake",
    "askip",
    "abatch",
    "to_list",
    "to_set",
    "to_dict",
    "for_each",
    "reduce",
    "find",
    "some",
    "every",
    "count",
    "first",
    "setup_logging",
]
