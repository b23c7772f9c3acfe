"""
Pydantic models for lazy_paginate

Page requests and results exchanged with the fetch function, error policies,
lifecycle hooks and the per-strategy pagination options.
"""

from collections.abc import Mapping
from enum import Enum
from typing import Annotated, Any, Callable, Dict, Generic, List, Literal, Optional, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class PaginationStrategy(str, Enum):
    """Pointer advancement strategies"""
    OFFSET = "offset"
    PAGE = "page"
    CURSOR = "cursor"


class ErrorPolicyType(str, Enum):
    """Error policy variants"""
    THROW = "throw"
    BREAK = "break"
    CONTINUE = "continue"
    CUSTOM = "custom"


class _ConfigModel(BaseModel):
    """Immutable configuration model accepting snake_case or camelCase keys."""
    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        populate_by_name=True,
        alias_generator=to_camel,
    )


class _PayloadModel(BaseModel):
    """Model for data returned by fetch functions; unknown keys are ignored."""
    model_config = ConfigDict(
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )


# ---------- Fetch function payloads ----------

class PageRequest(_ConfigModel):
    """
    Parameters for fetching one page.

    Carries ``limit`` plus exactly one pointer field, matching the strategy
    that built it: ``offset``, ``page`` or ``cursor`` (which may be None).
    """
    limit: int = Field(..., ge=1, description="Page size ceiling")
    offset: Optional[int] = Field(None, ge=0, description="Offset of the first item (offset strategy)")
    page: Optional[int] = Field(None, ge=1, description="1-indexed page number (page strategy)")
    cursor: Optional[str] = Field(None, description="Opaque cursor token (cursor strategy)")

    @property
    def strategy(self) -> PaginationStrategy:
        """Strategy this request was built for"""
        for name in ("offset", "page", "cursor"):
            if name in self.model_fields_set:
                return PaginationStrategy(name)
        raise ValueError("PageRequest carries no pointer field")

    def to_params(self) -> Dict[str, Any]:
        """Return ``limit`` and the pointer field as a plain dict."""
        return self.model_dump(exclude_unset=True)


class PageInfo(_PayloadModel):
    """Continuation information for a fetched page"""
    has_next_page: bool = Field(..., description="False on the last page")
    next_cursor: Optional[Any] = Field(None, description="Cursor for the next page; read only under the cursor strategy")


class PageResult(_PayloadModel, Generic[T]):
    """One page of items returned by a fetch function"""
    items: List[T] = Field(default_factory=list, description="Items in page order")
    page_info: PageInfo = Field(..., description="Continuation information")

    @field_validator("items", mode="before")
    @classmethod
    def materialize_items(cls, v):
        """Accept any iterable of items, preserving order"""
        if v is None:
            return []
        if isinstance(v, (list, str, bytes, Mapping)):
            return v
        try:
            return list(v)
        except TypeError:
            return v


# ---------- Error policies ----------

class ThrowPolicy(_ConfigModel):
    """Propagate the first fetch error to the consumer."""
    type: Literal["throw"] = "throw"


class BreakPolicy(_ConfigModel):
    """Stop cleanly on the first fetch error."""
    type: Literal["break"] = "break"


class ContinuePolicy(_ConfigModel):
    """Skip failed pages until ``max_error_count`` consecutive errors."""
    type: Literal["continue"] = "continue"
    max_error_count: int = Field(..., ge=1, description="Consecutive errors tolerated before stopping")


class CustomPolicy(_ConfigModel):
    """Delegate the decision to ``handler(error, {"consecutive_errors": n})``; truthy continues."""
    type: Literal["custom"] = "custom"
    handler: Callable[..., Any] = Field(..., description="Decision function, may be async")


ErrorPolicy = Annotated[
    Union[ThrowPolicy, BreakPolicy, ContinuePolicy, CustomPolicy],
    Field(discriminator="type"),
]


# ---------- Hooks ----------

class PaginationHooks(_ConfigModel):
    """Optional observer callbacks; each may be sync or async."""
    on_page: Optional[Callable[..., Any]] = Field(None, description="Called with the PageRequest before each fetch")
    on_return: Optional[Callable[..., Any]] = Field(None, description="Called once when pagination completes")
    on_error: Optional[Callable[..., Any]] = Field(None, description="Called with each fetch error (break/continue)")
    on_max_consecutive_errors: Optional[Callable[..., Any]] = Field(
        None,
        description="Called with (error, {'errors': n}) when the continue policy gives up"
    )


# ---------- Pagination options ----------

class _PaginationOptions(_ConfigModel):
    limit: int = Field(..., ge=1, description="Page size passed to every request")
    error_policy: ErrorPolicy = Field(..., description="Failure response")
    hooks: Optional[PaginationHooks] = Field(None, description="Lifecycle hooks")


class OffsetPaginationOptions(_PaginationOptions):
    """Offset/limit pagination"""
    strategy: Literal["offset"] = "offset"
    initial_offset: int = Field(0, ge=0, description="Offset of the first request")

    @field_validator("initial_offset", mode="before")
    @classmethod
    def default_offset(cls, v):
        return 0 if v is None else v


class PagePaginationOptions(_PaginationOptions):
    """Page-number pagination, pages are 1-indexed"""
    strategy: Literal["page"] = "page"
    initial_page: int = Field(1, ge=1, description="Page number of the first request")

    @field_validator("initial_page", mode="before")
    @classmethod
    def default_page(cls, v):
        return 1 if v is None else v


class CursorPaginationOptions(_PaginationOptions):
    """Opaque cursor pagination"""
    strategy: Literal["cursor"] = "cursor"
    initial_cursor: Optional[str] = Field(None, description="Cursor of the first request")


PaginationOptions = Annotated[
    Union[OffsetPaginationOptions, PagePaginationOptions, CursorPaginationOptions],
    Field(discriminator="strategy"),
]

pagination_options_adapter = TypeAdapter(PaginationOptions)
