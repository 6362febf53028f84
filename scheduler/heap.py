"""
Array-backed binary min-heap with a pluggable comparator.

Why not heapq?
heapq orders by `<` on the stored items, so callers have to wrap everything
in (priority, counter, item) tuples. Here the ordering is a Comparator
object injected at construction, which lets the queue swap in any domain
ordering without touching the data structure.

Layout: `items[0]` is a placeholder and the real heap starts at index 1.
That keeps the index arithmetic to single bit shifts:

    parent(i) = i >> 1
    left(i)   = i << 1
    right(i)  = (i << 1) + 1

             items: [ _, 5, 7, 11, 14, 9 ]

                          5 (1)
                        /      \
                    7 (2)      11 (3)
                    /   \
                14 (4)  9 (5)

Costs:
- insert:      O(log n)  sift the new leaf up
- extract_min: O(log n)  move the last leaf to the root, sift it down
- build:       O(n)      bottom-up heapify, NOT n inserts
- peek / size: O(1)

Invariant: no child is strictly higher priority than its parent, i.e.
compare(items[i], items[parent(i)]) is False for every i > 1.
"""

from typing import Any, Callable, Iterable, Iterator, Optional, Union

from scheduler.comparators import Comparator, NumericComparator, as_comparator


def parent_index(index: int) -> int:
    return index >> 1


def left_child_index(index: int) -> int:
    return index << 1


def right_child_index(index: int) -> int:
    return left_child_index(index) + 1


class BinaryHeap:

    def __init__(
        self,
        comparator: Union[Comparator, Callable[[Any, Any], bool], None] = None,
        placeholder: Any = 0,
    ):
        self.compare: Comparator = as_comparator(comparator) or NumericComparator()
        self.items: list = [placeholder]

    # ── Queries ─────────────────────────────────────────────────

    def size(self) -> int:
        """Number of stored items, not counting the placeholder."""
        return len(self.items) - 1

    def is_empty(self) -> bool:
        return self.size() == 0

    def __len__(self) -> int:
        return self.size()

    def peek(self) -> Optional[Any]:
        """The highest-priority item without removing it, or None if empty."""
        return None if self.is_empty() else self.items[1]

    find_min = peek

    def find_parent(self, index: int) -> Optional[Any]:
        """The item stored at the parent of `index`, or None for the root."""
        if index <= 1 or index > self.size():
            return None
        return self.items[parent_index(index)]

    def is_valid(self) -> bool:
        """Check the heap invariant at every non-root position."""
        return not any(
            self.compare(self.items[i], self.items[parent_index(i)])
            for i in range(2, self.size() + 1)
        )

    # ── Mutations ───────────────────────────────────────────────

    def insert(self, item: Any) -> None:
        self.items.append(item)
        self._sift_up(self.size())

    def extract_min(self) -> Optional[Any]:
        """Remove and return the highest-priority item, or None if empty."""
        if self.is_empty():
            return None

        first = self.items[1]
        last = self.items.pop()
        if not self.is_empty():
            self.items[1] = last
            self._sift_down(1)
        return first

    del_min = extract_min

    def pop_last(self) -> Optional[Any]:
        """
        Remove and return the last leaf, or None if empty.

        The last leaf is not necessarily the lowest-priority item, but taking
        it never breaks the invariant, so no rebalancing is needed.
        """
        if self.is_empty():
            return None
        return self.items.pop()

    def build(self, items: Iterable[Any]) -> None:
        """
        Bulk-load `items` and restore the invariant bottom-up.

        Leaves are already valid one-element heaps, so only positions
        size>>1 down to 1 need a sift-down. Most of those nodes sit near the
        bottom and move at most a level or two, which is where the O(n)
        total comes from.
        """
        self.items.extend(items)

        index = parent_index(self.size())
        while index > 0:
            self._sift_down(index)
            index -= 1

    def drain(self) -> Iterator[Any]:
        """Yield items in priority order until the heap is empty."""
        while not self.is_empty():
            yield self.extract_min()

    # ── Rebalancing ─────────────────────────────────────────────

    def _swap(self, a: int, b: int) -> None:
        self.items[a], self.items[b] = self.items[b], self.items[a]

    def _sift_up(self, index: int) -> None:
        while index > 1:
            parent = parent_index(index)
            if not self.compare(self.items[index], self.items[parent]):
                break
            self._swap(index, parent)
            index = parent

    def _min_child(self, index: int) -> int:
        """Index of the higher-priority child. Assumes a left child exists."""
        left = left_child_index(index)
        right = right_child_index(index)

        # Only a left child: it is the minimum by default
        if right > self.size():
            return left

        if self.compare(self.items[right], self.items[left]):
            return right
        return left

    def _sift_down(self, index: int) -> None:
        while left_child_index(index) <= self.size():
            child = self._min_child(index)
            if not self.compare(self.items[child], self.items[index]):
                break
            self._swap(index, child)
            index = child
