"""
Pull-based lazy iterators with an expressive combinator surface.

Every iterator exposes one primitive, ``advance()``, which returns the next
value or the ``EXHAUSTED`` marker. Adaptors (map, filter, take) wrap exactly
one upstream iterator and do no work until a consumer pulls from them.

Iterators are consumed as they are read. Passing the same instance to two
consumers (for example both sides of ``lt``) interleaves their reads; callers
must not do that.
"""

import operator
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any


class _Exhausted:
    """Marker returned by ``advance()`` once an iterator has no more values"""
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self):
        return "EXHAUSTED"


EXHAUSTED = _Exhausted()


class Ordering(Enum):
    """Result of a three-way comparison"""
    LESS = -1
    EQUAL = 0
    GREATER = 1
    INCOMPARABLE = "incomparable"

    @classmethod
    def from_result(cls, result):
        """Normalize a comparator result (a number or an Ordering) to an Ordering"""
        if isinstance(result, Ordering):
            return result
        if result < 0:
            return cls.LESS
        if result > 0:
            return cls.GREATER
        return cls.EQUAL


@dataclass(frozen=True)
class Continue:
    """Accumulator result that carries on folding with ``value``"""
    value: Any


@dataclass(frozen=True)
class Stop:
    """Accumulator result that ends a fold early"""
    value: Any = None


def _strict_equal(left, right):
    # 1 and 1.0 are not strictly equal; NaN is never equal to anything
    return type(left) is type(right) and left == right


class Iterator(ABC):
    """
    Base for every iterator. Subclasses implement ``_pull``; the base class
    latches exhaustion so that once ``EXHAUSTED`` has been seen the producer
    is never asked again.
    """
    def __init__(self):
        self._exhausted = False

    @abstractmethod
    def _pull(self):
        """Produce the next value, or EXHAUSTED"""

    def advance(self):
        """Return the next value, or EXHAUSTED when there are none left"""
        if self._exhausted:
            return EXHAUSTED
        value = self._pull()
        if value is EXHAUSTED:
            self._exhausted = True
        return value

    @property
    def exhausted(self):
        return self._exhausted

    # --------- native iteration protocol ----------
    def __iter__(self):
        return self

    def __next__(self):
        value = self.advance()
        if value is EXHAUSTED:
            raise StopIteration
        return value

    # --------- chainable adaptors (lazy) ----------
    def map(self, fn):
        return MapIterator(self, fn)

    def filter(self, pred):
        return FilterIterator(self, pred)

    def take(self, n):
        return TakeIterator(self, n)

    # --------- lexicographic comparison (consuming) ----------
    def _lexicographic(self, other, equal, compare, both_done, left_done, right_done):
        while True:
            left = self.advance()
            right = other.advance()

            if left is EXHAUSTED:
                return both_done if right is EXHAUSTED else left_done
            if right is EXHAUSTED:
                return right_done

            if equal(left, right):
                continue
            return compare(left, right)

    def lt(self, other):
        """True if this sequence sorts strictly before ``other``"""
        return self._lexicographic(other, _strict_equal, operator.lt, False, True, False)

    def le(self, other):
        """True if this sequence sorts before or equal to ``other``"""
        return self._lexicographic(other, _strict_equal, operator.le, True, True, False)

    def gt(self, other):
        """True if this sequence sorts strictly after ``other``"""
        return self._lexicographic(other, operator.eq, operator.gt, False, False, True)

    def ge(self, other):
        """True if this sequence sorts after or equal to ``other``"""
        return self._lexicographic(other, operator.eq, operator.ge, True, False, True)

    def cmp_by(self, other, fn):
        """
        Three-way lexicographic comparison using ``fn(a, b)``, which returns a
        negative, zero or positive number, or an ``Ordering``. Returns -1, 0
        or 1. Raises ValueError if ``fn`` reports ``Ordering.INCOMPARABLE``.
        """
        while True:
            left = self.advance()
            right = other.advance()

            if left is EXHAUSTED:
                return 0 if right is EXHAUSTED else -1
            if right is EXHAUSTED:
                return 1

            ordering = Ordering.from_result(fn(left, right))
            if ordering is Ordering.INCOMPARABLE:
                raise ValueError(f"cmp_by cannot order {left!r} and {right!r}")
            if ordering is not Ordering.EQUAL:
                return ordering.value

    def partial_cmp_by(self, other, fn):
        """
        Like ``cmp_by`` but ``fn`` may return ``Ordering.INCOMPARABLE``, which
        ends the comparison immediately. Returns an ``Ordering``.
        """
        while True:
            left = self.advance()
            right = other.advance()

            if left is EXHAUSTED:
                return Ordering.EQUAL if right is EXHAUSTED else Ordering.LESS
            if right is EXHAUSTED:
                return Ordering.GREATER

            ordering = Ordering.from_result(fn(left, right))
            if ordering is not Ordering.EQUAL:
                return ordering

    # --------- consuming operations ----------
    def reduce(self, initial, fn):
        """
        Fold the remaining values into ``initial`` with ``fn(acc, value)``.

        ``fn`` returns the new accumulator, either bare or wrapped in
        ``Continue``. Returning ``Stop`` ends the fold at once and that
        ``Stop`` instance is returned; nothing further is consumed.
        """
        acc = initial
        while True:
            value = self.advance()
            if value is EXHAUSTED:
                return acc
            result = fn(acc, value)
            if isinstance(result, Stop):
                return result
            acc = result.value if isinstance(result, Continue) else result

    def advance_by(self, count):
        """Discard ``count`` values; False if the iterator ran out first"""
        if count < 0:
            raise ValueError("count must be >= 0")
        for _ in range(count):
            if self.advance() is EXHAUSTED:
                return False
        return True

    def nth(self, n):
        """Return the value ``n`` positions ahead (0-indexed), or EXHAUSTED"""
        if not self.advance_by(n):
            return EXHAUSTED
        return self.advance()

    def find(self, pred):
        """Return the first value satisfying ``pred``, or EXHAUSTED"""
        while True:
            value = self.advance()
            if value is EXHAUSTED or pred(value):
                return value

    def count(self):
        """Drain the iterator and return how many values it produced"""
        total = 0
        while self.advance() is not EXHAUSTED:
            total += 1
        return total

    def to_list(self):
        return list(self)


class SequenceIterator(Iterator):
    """Walks an indexable sequence (list, tuple, range, str) with a cursor"""
    def __init__(self, data):
        super().__init__()
        self._data = data
        self._index = 0

    def _pull(self):
        if self._index >= len(self._data):
            return EXHAUSTED
        value = self._data[self._index]
        self._index += 1
        return value

    def rewind(self):
        self._index = 0
        self._exhausted = False


class MapIterator(Iterator):
    """Applies ``fn`` to each upstream value as it is pulled"""
    def __init__(self, upstream, fn):
        super().__init__()
        self._upstream = upstream
        self._fn = fn

    def _pull(self):
        value = self._upstream.advance()
        if value is EXHAUSTED:
            return EXHAUSTED
        return self._fn(value)


class FilterIterator(Iterator):
    """
    Yields upstream values accepted by ``pred``. Rejected values are skipped
    inside ``advance()``; constructing a filter calls nothing.
    """
    def __init__(self, upstream, pred):
        super().__init__()
        self._upstream = upstream
        self._pred = pred

    def _pull(self):
        while True:
            value = self._upstream.advance()
            if value is EXHAUSTED or self._pred(value):
                return value


class TakeIterator(Iterator):
    """Yields at most ``n`` upstream values"""
    def __init__(self, upstream, n):
        super().__init__()
        if n < 0:
            raise ValueError("n must be >= 0")
        self._upstream = upstream
        self._remaining = n

    def _pull(self):
        if self._remaining <= 0:
            return EXHAUSTED
        self._remaining -= 1
        return self._upstream.advance()
