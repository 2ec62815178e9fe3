"""
Sorting utilities
=================

The board sorts by one column at a time and must keep rows with equal keys
in their sheet order, in both directions. Flipping the direction on a column
therefore reverses the order of distinct keys only; ties keep their
original order.

Included:
- merge_sort: stable in ascending *and* descending order, O(n log n)
"""

from __future__ import annotations
from typing import Callable, List, TypeVar

T = TypeVar("T")


def merge_sort(arr: List[T], key: Callable[[T], object] = lambda x: x, descending: bool = False) -> List[T]:
    """Stable merge sort. Returns a new list."""
    if len(arr) <= 1:
        return arr[:]
    keyed = [(key(x), x) for x in arr]
    return [x for _, x in _sort(keyed, descending)]


def _sort(items: List[tuple], descending: bool) -> List[tuple]:
    if len(items) <= 1:
        return items
    mid = len(items) // 2
    left = _sort(items[:mid], descending)
    right = _sort(items[mid:], descending)
    return _merge(left, right, descending)


def _merge(left: List[tuple], right: List[tuple], descending: bool) -> List[tuple]:
    out: List[tuple] = []
    i = j = 0
    while i < len(left) and j < len(right):
        a, b = left[i][0], right[j][0]
        # on ties the left (earlier) item goes first
        take_left = not (a < b) if descending else not (b < a)
        if take_left:
            out.append(left[i]); i += 1
        else:
            out.append(right[j]); j += 1
    out.extend(left[i:])
    out.extend(right[j:])
    return out
