import pytest
from lazy import (
    DoubleEndedIterator, LazyCollection, ReversedIterator,
    lazy_filter, lazy_map, lazy_reversed, reduce
)


class ListDeque(DoubleEndedIterator):
    """Double-ended iterator over a plain list, for testing the adapters"""

    def __init__(self, items):
        self._items = list(items)
        self.pulls = 0

    def has_next(self):
        return bool(self._items)

    def __next__(self):
        if not self._items:
            raise StopIteration
        self.pulls += 1
        return self._items.pop(0)

    def reverse_next(self):
        if not self._items:
            raise StopIteration
        self.pulls += 1
        return self._items.pop()


class TestPrimitives:
    """Test map, filter, reduce and reversal"""

    def test_map_is_lazy(self):
        """Test that map doesn't call fn until iterated"""
        call_count = 0

        def track_calls(x):
            nonlocal call_count
            call_count += 1
            return x * 2

        mapped = lazy_map(range(5), track_calls)
        assert call_count == 0, "Should not execute during definition"
        assert next(mapped) == 0
        assert call_count == 1, f"Should compute one element, got {call_count}"
        assert list(mapped) == [2, 4, 6, 8]

    def test_filter_pulls_until_match(self):
        """Test that filter only pulls what it needs for one element"""
        source = ListDeque([1, 3, 4, 5, 6])
        evens = lazy_filter(source, lambda x: x % 2 == 0)
        assert source.pulls == 0
        assert next(evens) == 4
        assert source.pulls == 3, f"Expected 3 pulls, got {source.pulls}"
        assert list(evens) == [6]

    def test_reduce_folds_left_to_right(self):
        result = reduce(["a", "b", "c"], "", lambda acc, x: acc + x)
        assert result == "abc"

    def test_reduce_drains_source(self):
        source = ListDeque(range(10))
        assert reduce(source, 0, lambda acc, x: acc + x) == 45
        assert not source.has_next()

    def test_empty_sources(self):
        """Test primitives over an empty source"""
        sentinel = object()
        assert reduce([], sentinel, lambda acc, x: acc) is sentinel
        assert list(lazy_map([], lambda x: x)) == []
        assert list(lazy_filter([], lambda x: True)) == []
        with pytest.raises(StopIteration):
            next(lazy_map(iter([]), lambda x: x))

    def test_reversed_takes_from_the_back(self):
        reversed_it = lazy_reversed(ListDeque([1, 2, 3, 4]))
        assert reversed_it.has_next()
        assert next(reversed_it) == 4
        assert list(reversed_it) == [3, 2, 1]
        assert not reversed_it.has_next()

    def test_reversed_reverse_next_takes_from_the_front(self):
        reversed_it = lazy_reversed(ListDeque([1, 2, 3]))
        assert reversed_it.reverse_next() == 1
        assert next(reversed_it) == 3

    def test_builtin_reversed_roundtrip(self):
        """reversed() twice gives back the original source"""
        source = ListDeque([1, 2, 3])
        view = reversed(source)
        assert isinstance(view, ReversedIterator)
        assert reversed(view) is source

    def test_reversed_requires_double_ended_source(self):
        with pytest.raises(TypeError):
            lazy_reversed(iter([1, 2, 3]))

    def test_composition_stays_lazy(self):
        """Test that a reverse/filter/map chain pulls one element at a time"""
        source = ListDeque(range(1, 11))
        chain = lazy_map(lazy_filter(lazy_reversed(source), lambda x: x % 3 == 0), lambda x: -x)
        assert source.pulls == 0
        assert next(chain) == -9
        assert source.pulls == 2, f"Expected 2 pulls, got {source.pulls}"


class TestLazyCollection:
    """Test the chainable collection"""

    def test_map_filter_chain(self):
        data = LazyCollection([1, 2, 3, 4, 5])
        result = data.map(lambda x: x * 2).filter(lambda x: x > 4).to_list()
        assert result == [6, 8, 10]

    def test_operations_are_deferred(self):
        call_count = 0

        def track_calls(x):
            nonlocal call_count
            call_count += 1
            return x

        lazy_col = LazyCollection(range(100)).map(track_calls).take(3)
        assert call_count == 0, "Should not execute during definition"
        assert lazy_col.to_list() == [0, 1, 2]
        assert call_count == 3, f"Should execute only 3 operations, got {call_count}"

    def test_reduce_count_first(self):
        data = LazyCollection(range(1, 6))
        assert data.reduce(1, lambda acc, x: acc * x) == 120
        assert data.count() == 5
        assert data.first() == 1
        assert LazyCollection([]).first(default="none") == "none"

    def test_reversed_over_double_ended_source(self):
        source = ListDeque(range(10))
        result = LazyCollection(source).reversed().filter(lambda x: x % 2 == 1).take(2).to_list()
        assert result == [9, 7]
        assert source.pulls == 3

    def test_reversed_must_come_first(self):
        with pytest.raises(ValueError):
            LazyCollection(ListDeque([1])).map(str).reversed()

    def test_reversed_over_plain_iterable_fails(self):
        with pytest.raises(TypeError):
            LazyCollection([1, 2, 3]).reversed().to_list()

    def test_one_shot_source_is_consumed_once(self):
        lazy_col = LazyCollection(ListDeque([1, 2, 3]))
        assert lazy_col.to_list() == [1, 2, 3]
        assert lazy_col.to_list() == []
