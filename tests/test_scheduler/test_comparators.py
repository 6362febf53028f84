"""
Tests for the comparator strategies.

TieBreakComparator is the one the queue relies on: equal domain priority
must fall back to push order (lower sequence first).
"""

from types import SimpleNamespace

import pytest

from scheduler.comparators import (
    Comparator,
    FunctionComparator,
    NumericComparator,
    TieBreakComparator,
    as_comparator,
)


def _node(priority, sequence):
    return SimpleNamespace(priority=priority, sequence=sequence)


def test_numeric_comparator_is_strict_less_than():
    compare = NumericComparator()
    assert compare(1, 2)
    assert not compare(2, 1)
    assert not compare(2, 2)


def test_numeric_comparator_with_key():
    compare = NumericComparator(key=lambda n: n.priority)
    assert compare(_node(1, 5), _node(2, 0))
    assert not compare(_node(2, 0), _node(1, 5))


def test_tie_break_prefers_domain_order():
    compare = TieBreakComparator(NumericComparator(key=lambda n: n.priority))
    early_low = _node(priority=9, sequence=0)
    late_high = _node(priority=1, sequence=5)

    assert compare(late_high, early_low)
    assert not compare(early_low, late_high)


def test_tie_break_falls_back_to_sequence():
    compare = TieBreakComparator(NumericComparator(key=lambda n: n.priority))
    first = _node(priority=5, sequence=0)
    second = _node(priority=5, sequence=1)

    assert compare(first, second)
    assert not compare(second, first)


def test_as_comparator_wraps_functions():
    wrapped = as_comparator(lambda a, b: a > b)
    assert isinstance(wrapped, FunctionComparator)
    assert wrapped(3, 2)


def test_as_comparator_passes_through_instances_and_none():
    comparator = NumericComparator()
    assert as_comparator(comparator) is comparator
    assert as_comparator(None) is None


def test_as_comparator_rejects_non_callables():
    with pytest.raises(TypeError):
        as_comparator("lowest first")


def test_comparator_subclass_is_callable():
    class ByLength(Comparator):
        def compare(self, a, b) -> bool:
            return len(a) < len(b)

    assert ByLength()("ab", "abc")
