from typing import Any, AsyncIterable, AsyncIterator, Callable, Dict, Iterable, List, Optional, Set, Union

from . import operators
from .utils import iterate_any


class _IterableSource:
    """Re-iterable async view over a sync or async iterable."""

    def __init__(self, iterable):
        self._iterable = iterable

    def __aiter__(self):
        return iterate_any(self._iterable)


class LazyCollection:
    """
    A chainable, lazy async collection. Operators are stored and applied
    only when you iterate; terminal methods drive the pipeline and return
    a result.

    Iterate it directly with ``async for``. Each iteration rebuilds the
    pipeline over the source, so a collection over a re-iterable source
    (such as a Paginator) can be consumed more than once.
    """
    def __init__(self, source: AsyncIterable, ops=None):
        self._source = source
        self._ops = tuple(ops or ())     # sequence of (operator, args)

    @classmethod
    def from_iterable(cls, iterable: Union[Iterable, AsyncIterable]) -> "LazyCollection":
        """Wrap any sync or async iterable."""
        return cls(_IterableSource(iterable))

    @property
    def source(self) -> AsyncIterable:
        return self._source

    # --------- chainable operators (lazy) ----------
    def filter(self, predicate: Callable[..., Any]) -> "LazyCollection":
        return self._with_op(operators.afilter, predicate)

    def map(self, transform: Callable[..., Any]) -> "LazyCollection":
        return self._with_op(operators.amap, transform)

    def take(self, count: int) -> "LazyCollection":
        return self._with_op(operators.atake, int(count))

    def skip(self, count: int) -> "LazyCollection":
        return self._with_op(operators.askip, int(count))

    def batch(self, size: int) -> "LazyCollection":
        size = int(size)
        if size < 1:
            raise ValueError("Batch size must be >= 1")
        return self._with_op(operators.abatch, size)

    def chunk(self, size: int) -> "LazyCollection":
        """Alias for batch() - groups elements into chunks of specified size"""
        return self.batch(size)

    # --------- terminal operations (force evaluation) ----------
    async def to_list(self) -> List[Any]:
        return await operators.to_list(self)

    async def to_set(self) -> Set[Any]:
        return await operators.to_set(self)

    async def to_dict(self, key_fn: Callable[[Any], Any]) -> Dict[Any, Any]:
        """Key every element by key_fn(element); later elements win on duplicate keys"""
        return await operators.to_dict(self, key_fn)

    async def for_each(self, fn: Callable[..., Any]) -> None:
        await operators.for_each(self, fn)

    async def reduce(self, reducer: Callable[..., Any], initial: Any) -> Any:
        """Fold elements left to right with reducer(accumulator, element, index)"""
        return await operators.reduce(self, reducer, initial)

    async def find(self, predicate: Callable[..., Any], default: Optional[Any] = None) -> Any:
        """Return the first element that satisfies the predicate, or default"""
        return await operators.find(self, predicate, default)

    async def some(self, predicate: Callable[..., Any]) -> bool:
        return await operators.some(self, predicate)

    async def every(self, predicate: Callable[..., Any]) -> bool:
        return await operators.every(self, predicate)

    async def count(self) -> int:
        """Return the count of elements"""
        return await operators.count(self)

    async def first(self, default: Optional[Any] = None) -> Any:
        """Return the first element, or default if empty"""
        return await operators.first(self, default)

    # --------- async iterator protocol ----------
    def __aiter__(self) -> AsyncIterator[Any]:
        it = self._source
        for op, args in self._ops:
            it = op(it, *args)
        return it.__aiter__()

    # --------- helpers ----------
    def _with_op(self, op, *args) -> "LazyCollection":
        return LazyCollection(self._source, self._ops + ((op, args),))
