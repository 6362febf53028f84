"""
Comparators decide which of two items must be processed first (Strategy pattern).

The heap never looks at priorities itself. It only ever asks one question:

    compare(a, b) -> True if `a` must be processed no later than `b`

so any ordering an application wants (deadline, cost, customer tier...) is
just another Comparator. Plain functions work too; as_comparator() wraps them.

NumericComparator is the fallback: `a < b`, optionally on a key. It only
makes sense for numbers, which is why the queue warns when it has to use it.

TieBreakComparator is what the queue actually hands to its heap. When the
domain comparator says two tasks are equal (neither comes first), the one
pushed earlier (lower sequence number) wins. That keeps dispatch order
deterministic and FIFO among equal priorities.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Optional


class Comparator(ABC):
    """Interface that all orderings implement: one method, compare()."""

    @abstractmethod
    def compare(self, a: Any, b: Any) -> bool:
        """Return True iff `a` must be processed no later than `b`."""
        ...

    def __call__(self, a: Any, b: Any) -> bool:
        return self.compare(a, b)


class NumericComparator(Comparator):

    def __init__(self, key: Optional[Callable[[Any], Any]] = None):
        self.key = key

    def compare(self, a: Any, b: Any) -> bool:
        if self.key is None:
            return a < b
        return self.key(a) < self.key(b)


class FunctionComparator(Comparator):
    """Adapts a plain `fn(a, b) -> bool` to the Comparator interface."""

    def __init__(self, fn: Callable[[Any, Any], bool]):
        self.fn = fn

    def compare(self, a: Any, b: Any) -> bool:
        return bool(self.fn(a, b))


class TieBreakComparator(Comparator):
    """
    Domain ordering first, push order second.

    compare(a, b) = domain(a, b) or (domain says equal and a.sequence < b.sequence)

    Both operands must carry a `sequence` attribute (TaskNode does).
    """

    def __init__(self, domain: Comparator):
        self.domain = domain

    def compare(self, a: Any, b: Any) -> bool:
        if self.domain(a, b):
            return True
        if self.domain(b, a):
            return False
        return a.sequence < b.sequence


def as_comparator(value: Any) -> Optional[Comparator]:
    """
    Normalize whatever the caller passed into a Comparator.

    None stays None (the caller decides what the default is).
    """
    if value is None or isinstance(value, Comparator):
        return value
    if callable(value):
        return FunctionComparator(value)
    raise TypeError(f"Comparator must be callable, got {type(value).__name__}")
