"""
Standalone operators and collectors for async sequences.

Operators (``afilter``, ``amap``, ``atake``, ``askip``, ``abatch``) consume an
async iterable and lazily produce another. Collectors drive a sequence and
return one result. Callbacks may be sync or async and are awaited one at a
time in source order. Callbacks documented as receiving an index may also
be written without it.

The index is passed whenever the callback can take one more positional
argument than the item (two more for ``reduce``), and that includes
parameters with a default. ``def over(item, threshold=5)`` therefore
receives the index as ``threshold``; bind such values with
``functools.partial`` or a keyword-only parameter instead.
"""

from typing import Any, AsyncIterable, AsyncIterator, Callable, Dict, List, Optional, Set, Tuple, TypeVar

from .utils import call, closing_iter, with_optional_index

T = TypeVar("T")
U = TypeVar("U")


# ---------- operators (lazy) ----------

async def afilter(source: AsyncIterable[T], predicate: Callable[..., Any]) -> AsyncIterator[T]:
    """Yield the items for which ``predicate(item, index)`` is truthy."""
    predicate = with_optional_index(predicate, 1)
    index = 0
    async with closing_iter(source) as iterator:
        async for item in iterator:
            if await call(predicate, item, index):
                yield item
            index += 1


async def amap(source: AsyncIterable[T], transform: Callable[..., Any]) -> AsyncIterator[Any]:
    """Yield ``transform(item, index)`` for every item."""
    transform = with_optional_index(transform, 1)
    index = 0
    async with closing_iter(source) as iterator:
        async for item in iterator:
            yield await call(transform, item, index)
            index += 1


async def atake(source: AsyncIterable[T], count: int) -> AsyncIterator[T]:
    """Yield at most ``count`` items, then stop pulling from the source."""
    if count <= 0:
        return
    taken = 0
    async with closing_iter(source) as iterator:
        async for item in iterator:
            yield item
            taken += 1
            if taken >= count:
                return


async def askip(source: AsyncIterable[T], count: int) -> AsyncIterator[T]:
    """Discard the first ``count`` items and yield the rest."""
    skipped = 0
    async with closing_iter(source) as iterator:
        async for item in iterator:
            if skipped < count:
                skipped += 1
                continue
            yield item


def abatch(source: AsyncIterable[T], size: int) -> AsyncIterator[Tuple[T, ...]]:
    """Group consecutive items into tuples of ``size``; the last may be shorter."""
    size = int(size)
    if size < 1:
        raise ValueError("Batch size must be >= 1")
    return _batch(source, size)


async def _batch(source, size):
    bucket = []
    async with closing_iter(source) as iterator:
        async for item in iterator:
            bucket.append(item)
            if len(bucket) == size:
                yield tuple(bucket)
                bucket = []
    if bucket:
        yield tuple(bucket)


# ---------- collectors (terminal) ----------

async def to_list(source: AsyncIterable[T]) -> List[T]:
    """Collect every item, in order."""
    result = []
    async with closing_iter(source) as iterator:
        async for item in iterator:
            result.append(item)
    return result


async def to_set(source: AsyncIterable[T]) -> Set[T]:
    """Collect the distinct items."""
    result = set()
    async with closing_iter(source) as iterator:
        async for item in iterator:
            result.add(item)
    return result


async def to_dict(source: AsyncIterable[T], key_fn: Callable[[T], Any]) -> Dict[Any, T]:
    """Map ``key_fn(item)`` to item; a later item replaces an earlier one with the same key."""
    result = {}
    async with closing_iter(source) as iterator:
        async for item in iterator:
            result[await call(key_fn, item)] = item
    return result


async def for_each(source: AsyncIterable[T], fn: Callable[..., Any]) -> None:
    """Call ``fn(item, index)`` for every item, awaiting each call before pulling the next."""
    fn = with_optional_index(fn, 1)
    index = 0
    async with closing_iter(source) as iterator:
        async for item in iterator:
            await call(fn, item, index)
            index += 1


async def reduce(source: AsyncIterable[T], reducer: Callable[..., Any], initial: U) -> U:
    """
    Fold the sequence with ``reducer(accumulator, item, index)``.

    Returns ``initial`` for an empty sequence.
    """
    reducer = with_optional_index(reducer, 2)
    accumulator = initial
    index = 0
    async with closing_iter(source) as iterator:
        async for item in iterator:
            accumulator = await call(reducer, accumulator, item, index)
            index += 1
    return accumulator


async def find(source: AsyncIterable[T], predicate: Callable[..., Any], default: Optional[T] = None) -> Optional[T]:
    """Return the first item matching ``predicate``, or ``default``."""
    predicate = with_optional_index(predicate, 1)
    index = 0
    async with closing_iter(source) as iterator:
        async for item in iterator:
            if await call(predicate, item, index):
                return item
            index += 1
    return default


async def some(source: AsyncIterable[T], predicate: Callable[..., Any]) -> bool:
    """True if any item matches; False for an empty sequence."""
    predicate = with_optional_index(predicate, 1)
    index = 0
    async with closing_iter(source) as iterator:
        async for item in iterator:
            if await call(predicate, item, index):
                return True
            index += 1
    return False


async def every(source: AsyncIterable[T], predicate: Callable[..., Any]) -> bool:
    """True if all items match; True for an empty sequence."""
    predicate = with_optional_index(predicate, 1)
    index = 0
    async with closing_iter(source) as iterator:
        async for item in iterator:
            if not await call(predicate, item, index):
                return False
            index += 1
    return True


async def count(source: AsyncIterable[T]) -> int:
    """Number of items in the sequence."""
    total = 0
    async with closing_iter(source) as iterator:
        async for _ in iterator:
            total += 1
    return total


async def first(source: AsyncIterable[T], default: Optional[T] = None) -> Optional[T]:
    """First item, or ``default`` if the sequence is empty."""
    async with closing_iter(source) as iterator:
        async for item in iterator:
            return item
    return default
