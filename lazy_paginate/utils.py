"""
Helpers shared by the paginator, the operators and the fluent wrapper.

Caller-supplied callables may be plain functions or coroutine functions, so
everything that invokes one goes through ``resolve``.
"""

import inspect
import logging
import os
import sys
from contextlib import asynccontextmanager
from typing import Any, AsyncIterable, AsyncIterator, Awaitable, Iterable, Optional, TypeVar, Union

T = TypeVar("T")

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - [%(funcName)s:%(lineno)d] - %(message)s'
LOG_LEVEL_ENV = "LAZY_PAGINATE_LOG_LEVEL"


async def resolve(value: Union[T, Awaitable[T]]) -> T:
    """Await ``value`` if it is awaitable, otherwise return it unchanged."""
    if inspect.isawaitable(value):
        return await value
    return value


async def call(fn, *args, **kwargs) -> Any:
    """Invoke a sync or async callable and return its resolved result."""
    return await resolve(fn(*args, **kwargs))


def with_optional_index(fn, arg_count: int):
    """
    Adapt ``fn`` so it can always be called as ``fn(*args, index)``.

    Callbacks that accept only ``arg_count`` positional arguments (for example
    ``lambda item: ...``) are called without the trailing index. Defaulted
    positional parameters count, keyword-only ones do not.
    """
    try:
        params = list(inspect.signature(fn).parameters.values())
    except (TypeError, ValueError):
        return lambda *args: fn(*args[:arg_count])

    if any(p.kind is p.VAR_POSITIONAL for p in params):
        return fn
    positional = [p for p in params if p.kind in (p.POSITIONAL_ONLY, p.POSITIONAL_OR_KEYWORD)]
    if len(positional) > arg_count:
        return fn
    return lambda *args: fn(*args[:arg_count])


@asynccontextmanager
async def closing_iter(source: AsyncIterable[T]) -> AsyncIterator[AsyncIterator[T]]:
    """
    Open an iterator over ``source`` and close it on exit.

    Closing an async generator that is suspended mid-page finalises the run,
    so an operator that stops early never triggers another fetch.
    """
    iterator = source.__aiter__()
    try:
        yield iterator
    finally:
        aclose = getattr(iterator, "aclose", None)
        if aclose is not None:
            await aclose()


async def iterate_any(source: Union[Iterable[T], AsyncIterable[T]]) -> AsyncIterator[T]:
    """Yield from a sync or async iterable."""
    if hasattr(source, "__aiter__"):
        async with closing_iter(source) as iterator:
            async for item in iterator:
                yield item
    else:
        for item in source:
            yield item


def setup_logging(level: Optional[Union[int, str]] = None) -> logging.Logger:
    """Setup logging for the library's loggers"""
    if level is None:
        level = os.environ.get(LOG_LEVEL_ENV, "INFO")
    if isinstance(level, str):
        level = level.upper()

    logger = logging.getLogger("lazy_paginate")
    logger.setLevel(level)
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    return logger
