"""
Lazy sequence primitives.

`lazy_map`, `lazy_filter` and `lazy_reversed` are single-pass adapters that
pull from their source only when asked; `reduce` is the one primitive that
drains its source. `DoubleEndedIterator` is the capability the reversal
adapter needs: an iterator that can also take items from the back.
"""

from abc import ABC, abstractmethod
from itertools import islice
from typing import Any, Callable, Iterable, Iterator


class DoubleEndedIterator(ABC):
    """
    An iterator that can yield from both ends of the same sequence.

    `has_next` reports whether any element remains, from either end.
    `__next__` takes from the front and `reverse_next` from the back; both
    raise StopIteration once the sequence is exhausted.
    """

    @abstractmethod
    def has_next(self) -> bool:
        ...

    @abstractmethod
    def __next__(self):
        ...

    @abstractmethod
    def reverse_next(self):
        ...

    def __iter__(self):
        return self

    def __reversed__(self):
        return lazy_reversed(self)


class ReversedIterator(DoubleEndedIterator):
    """Forward view of a double-ended source, taking from its back."""

    def __init__(self, source: DoubleEndedIterator):
        self._source = source

    def has_next(self) -> bool:
        return self._source.has_next()

    def __next__(self):
        return self._source.reverse_next()

    def reverse_next(self):
        return next(self._source)

    def __reversed__(self):
        return self._source


def lazy_map(source: Iterable, fn: Callable[[Any], Any]) -> Iterator:
    """Yield fn(x) for each x in source, one at a time"""
    for item in source:
        yield fn(item)


def lazy_filter(source: Iterable, predicate: Callable[[Any], bool]) -> Iterator:
    """Yield only the elements of source that satisfy predicate"""
    for item in source:
        if predicate(item):
            yield item


def reduce(source: Iterable, initial: Any, combine: Callable[[Any, Any], Any]) -> Any:
    """Fold source left to right into initial. Consumes the whole source."""
    accumulator = initial
    for item in source:
        accumulator = combine(accumulator, item)
    return accumulator


def lazy_reversed(source: DoubleEndedIterator) -> ReversedIterator:
    """Iterate a double-ended source from its back"""
    if not isinstance(source, DoubleEndedIterator):
        raise TypeError(f"Cannot reverse {type(source).__name__}: not a DoubleEndedIterator")
    return ReversedIterator(source)


class LazyCollection:
    """
    A chainable, lazy collection. Transformations are stored and applied
    only when you iterate.

    The source is iterated once per pass, so a collection over a one-shot
    iterator (such as a StudentListIterator) can only be consumed once.
    """
    def __init__(self, source, ops=None):
        self._source = source
        self._ops = ops or []          # sequence of ("op_name", callable/arg)

    # --------- chainable operators (lazy) ----------
    def map(self, fn):
        return self._with_op(("map", fn))

    def filter(self, pred):
        return self._with_op(("filter", pred))

    def take(self, n):
        return self._with_op(("take", int(n)))

    def reversed(self):
        """Walk the source from its back. Must come before any other op."""
        if self._ops:
            raise ValueError("reversed() must be applied before map/filter/take")
        return self._with_op(("reversed", None))

    # --------- forcing evaluation ----------
    def to_list(self):
        return list(self)

    def reduce(self, initial, combine):
        """Fold all items left to right into `initial`"""
        return reduce(self, initial, combine)

    def count(self):
        """Return the count of elements"""
        return self.reduce(0, lambda total, _: total + 1)

    def first(self, default=None):
        """Return the first element, or default if empty"""
        for item in self:
            return item
        return default

    # --------- iterator protocol ----------
    def __iter__(self):
        it = iter(self._source)
        for op, arg in self._ops:
            if op == "reversed":
                it = lazy_reversed(it)
            elif op == "map":
                it = lazy_map(it, arg)
            elif op == "filter":
                it = lazy_filter(it, arg)
            elif op == "take":
                it = islice(it, arg)
            else:
                raise ValueError(f"Unknown op: {op}")
        yield from it

    # --------- helpers ----------
    def _with_op(self, op_tuple):
        return LazyCollection(self._source, self._ops + [op_tuple])
