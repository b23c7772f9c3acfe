"""
Pagination state machine.

``Paginator`` repeatedly calls a page-fetch function, advances an offset,
page number or cursor between calls, flattens every page's items into one
lazy async sequence and applies the configured error policy when a fetch
fails. Pages are fetched strictly one at a time and only when the consumer
pulls past the end of the previous page.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, AsyncIterator, Awaitable, Callable, Union

from pydantic import BaseModel, ValidationError

from .exceptions import PageResultError, PaginationConfigError
from .lazy import LazyCollection
from .models import (
    CursorPaginationOptions,
    ErrorPolicyType,
    OffsetPaginationOptions,
    PageInfo,
    PagePaginationOptions,
    PageRequest,
    PageResult,
    PaginationHooks,
    PaginationStrategy,
    pagination_options_adapter,
)
from .utils import call

logger = logging.getLogger(__name__)

FetchPage = Callable[[PageRequest], Union[Awaitable[Any], Any]]
AnyPaginationOptions = Union[OffsetPaginationOptions, PagePaginationOptions, CursorPaginationOptions]

_OPTION_MODELS = (OffsetPaginationOptions, PagePaginationOptions, CursorPaginationOptions)
_NO_HOOKS = PaginationHooks()


class ErrorAction(str, Enum):
    """Outcome of evaluating the error policy for one failed fetch"""
    THROW = "throw"
    BREAK = "break"
    CONTINUE = "continue"


@dataclass
class PaginationState:
    """
    Working state of one pagination run.

    ``pointer`` always holds the position used by the most recently issued
    request: an offset, a page number or a cursor depending on ``strategy``.
    """
    strategy: PaginationStrategy
    pointer: Union[int, str, None]
    consecutive_error_count: int = 0

    @classmethod
    def initial(cls, options: AnyPaginationOptions) -> "PaginationState":
        strategy = PaginationStrategy(options.strategy)
        if strategy is PaginationStrategy.OFFSET:
            return cls(strategy, options.initial_offset)
        if strategy is PaginationStrategy.PAGE:
            return cls(strategy, options.initial_page)
        return cls(strategy, options.initial_cursor)

    def request(self, limit: int) -> PageRequest:
        """Build the request for the current pointer"""
        return PageRequest(limit=limit, **{self.strategy.value: self.pointer})

    def advance_after_success(self, limit: int, page_info: PageInfo) -> None:
        if self.strategy is PaginationStrategy.OFFSET:
            self.pointer += limit
        elif self.strategy is PaginationStrategy.PAGE:
            self.pointer += 1
        elif page_info.next_cursor is not None:
            self.pointer = str(page_info.next_cursor)
        else:
            logger.debug(f"Page has no next cursor; retaining cursor {self.pointer!r}")
        self.consecutive_error_count = 0

    def advance_after_failure(self, limit: int) -> None:
        # A cursor is retried as-is: the next one is unknown until a fetch succeeds.
        if self.strategy is PaginationStrategy.OFFSET:
            self.pointer += limit
        elif self.strategy is PaginationStrategy.PAGE:
            self.pointer += 1


@dataclass
class PaginationStats:
    """Counters for the most recent run"""
    pages_fetched: int = 0
    items_yielded: int = 0
    errors: int = 0

    def to_dict(self):
        return {
            "pages_fetched": self.pages_fetched,
            "items_yielded": self.items_yielded,
            "errors": self.errors,
        }


def parse_options(options: Union[AnyPaginationOptions, Mapping, None] = None, **overrides) -> AnyPaginationOptions:
    """
    Validate pagination options.

    ``options`` may be one of the option models or a mapping using snake_case
    or camelCase keys; keyword ``overrides`` are merged on top.

    Raises:
        PaginationConfigError: the options do not describe exactly one valid
            strategy configuration.
    """
    if isinstance(options, _OPTION_MODELS) and not overrides:
        return options

    if options is None:
        data = {}
    elif isinstance(options, BaseModel):
        data = dict(options)
    elif isinstance(options, Mapping):
        data = dict(options)
    else:
        raise PaginationConfigError(
            f"Pagination options must be a mapping or options model, got {type(options).__name__}"
        )
    data.update(overrides)

    try:
        return pagination_options_adapter.validate_python(data)
    except ValidationError as e:
        raise PaginationConfigError(f"Invalid pagination options: {e}") from e


class Paginator:
    """
    Lazy async sequence over every item of every fetched page.

    Each ``async for`` starts a fresh run with its own state, so a Paginator
    can be iterated more than once; a single run is single-pass. Stopping
    iteration early (or closing the iterator) ends the run without any
    further fetches or hook calls.
    """

    def __init__(self, fetch_page: FetchPage, options: Union[AnyPaginationOptions, Mapping, None] = None, **overrides):
        if not callable(fetch_page):
            raise PaginationConfigError("fetch_page must be callable")
        self.fetch_page = fetch_page
        self.options = parse_options(options, **overrides)
        self.hooks = self.options.hooks or _NO_HOOKS
        self.stats = PaginationStats()

    @property
    def strategy(self) -> PaginationStrategy:
        return PaginationStrategy(self.options.strategy)

    def __aiter__(self) -> AsyncIterator[Any]:
        return self._run()

    async def _run(self) -> AsyncIterator[Any]:
        limit = self.options.limit
        hooks = self.hooks
        state = PaginationState.initial(self.options)
        stats = self.stats = PaginationStats()

        while True:
            request = state.request(limit)
            if hooks.on_page is not None:
                await call(hooks.on_page, request)

            logger.debug(f"Fetching page: strategy={state.strategy.value} params={request.to_params()}")
            try:
                result = await self._fetch(request)
            except Exception as error:
                state.consecutive_error_count += 1
                stats.errors += 1
                logger.warning(
                    f"Page fetch failed ({state.consecutive_error_count} consecutive, "
                    f"policy={self.options.error_policy.type}): {error!r}"
                )

                action = await self._resolve_error_action(error, state)
                if action is ErrorAction.THROW:
                    raise
                if action is ErrorAction.BREAK:
                    logger.info(f"Pagination stopped by error policy after {stats.pages_fetched} pages")
                    await self._finish(stats)
                    return
                state.advance_after_failure(limit)
                continue

            stats.pages_fetched += 1
            logger.debug(
                f"Received page: {len(result.items)} items, has_next_page={result.page_info.has_next_page}"
            )
            for item in result.items:
                stats.items_yielded += 1
                yield item

            if not result.page_info.has_next_page:
                await self._finish(stats)
                return

            state.advance_after_success(limit, result.page_info)

    async def _fetch(self, request: PageRequest) -> PageResult:
        raw = await call(self.fetch_page, request)
        if isinstance(raw, PageResult):
            return raw
        try:
            return PageResult.model_validate(raw)
        except ValidationError as e:
            raise PageResultError(f"Fetch function returned an invalid page: {e}") from e

    async def _resolve_error_action(self, error: Exception, state: PaginationState) -> ErrorAction:
        policy = self.options.error_policy
        hooks = self.hooks

        if policy.type == ErrorPolicyType.THROW:
            return ErrorAction.THROW

        if policy.type == ErrorPolicyType.CUSTOM:
            should_continue = await call(
                policy.handler, error, {"consecutive_errors": state.consecutive_error_count}
            )
            return ErrorAction.CONTINUE if should_continue else ErrorAction.BREAK

        # break and continue both report the error first; a failing on_error stops cleanly
        if hooks.on_error is not None:
            try:
                await call(hooks.on_error, error)
            except Exception as hook_error:
                logger.warning(f"on_error hook raised {hook_error!r}; stopping pagination")
                return ErrorAction.BREAK

        if policy.type == ErrorPolicyType.BREAK:
            return ErrorAction.BREAK

        if state.consecutive_error_count < policy.max_error_count:
            return ErrorAction.CONTINUE

        logger.error(f"Reached {state.consecutive_error_count} consecutive page fetch errors; stopping pagination")
        if hooks.on_max_consecutive_errors is not None:
            try:
                await call(hooks.on_max_consecutive_errors, error, {"errors": state.consecutive_error_count})
            except Exception as hook_error:
                logger.warning(f"on_max_consecutive_errors hook raised {hook_error!r}")
        return ErrorAction.BREAK

    async def _finish(self, stats: PaginationStats) -> None:
        logger.info(
            f"Pagination complete: {stats.pages_fetched} pages, "
            f"{stats.items_yielded} items, {stats.errors} errors"
        )
        if self.hooks.on_return is not None:
            await call(self.hooks.on_return)


def paginate(fetch_page: FetchPage, options: Union[AnyPaginationOptions, Mapping, None] = None, **overrides) -> LazyCollection:
    """
    Lazily paginate through ``fetch_page``.

    Returns a LazyCollection: usable directly with ``async for`` and
    chainable with filter/map/take/skip and the terminal collectors.

    Example:
        items = await paginate(
            fetch_users,
            strategy="offset",
            limit=100,
            error_policy={"type": "continue", "max_error_count": 3},
        ).filter(lambda user: user["active"]).to_list()
    """
    return LazyCollection(Paginator(fetch_page, options, **overrides))
