"""Ordered index: keys need a total order (__lt__ and __eq__).

Entries live in two parallel lists kept sorted by key, the same
bisect-over-a-sorted-column trick a timestamp-ordered store uses for
range queries:

    _keys:    [k0, k1, k2, ...]      sorted, searched with bisect
    _entries: [e0, e1, e2, ...]      _entries[i].key is _keys[i]

Lookup is O(log n). Insert and remove are O(log n) to find the slot
plus O(n) list shifting, which is a memmove in C and cheap for the
map sizes this is meant for (thousands of live keys, not millions).

Keys that are equal must compare equal under ==, and keys that
aren't mutually comparable raise TypeError from bisect at insert time.
"""
from __future__ import annotations

import bisect
from typing import TYPE_CHECKING, Any, TypeVar

from rodmap.index.base import Entry, IndexBase

if TYPE_CHECKING:
    from rodmap.handle import Cell

K = TypeVar("K")


class OrderedIndex(IndexBase[K]):
    """Sorted-list index, searched with bisect."""

    __slots__ = ("_keys", "_entries")

    def __init__(self) -> None:
        self._keys: list[K] = []
        self._entries: list[Entry[K]] = []

    def _find(self, key: K) -> int:
        """Position of key, or -1 if absent."""
        i = bisect.bisect_left(self._keys, key)
        if i < len(self._keys) and self._keys[i] == key:
            return i
        return -1

    def insert(self, entry: Entry[K]) -> bool:
        i = bisect.bisect_left(self._keys, entry.key)
        if i < len(self._keys) and self._keys[i] == entry.key:
            self._keys[i] = entry.key
            self._entries[i] = entry
            return False
        self._keys.insert(i, entry.key)
        self._entries.insert(i, entry)
        return True

    def lookup(self, key: K) -> Entry[K] | None:
        i = self._find(key)
        if i < 0:
            return None
        return self._entries[i]

    def remove(self, key: K, expected: Cell[K, Any] | None = None) -> bool:
        i = self._find(key)
        if i < 0:
            return False
        if expected is not None and not self._entries[i].refers_to(expected):
            return False
        del self._keys[i]
        del self._entries[i]
        return True

    def keys(self) -> list[K]:
        return list(self._keys)

    def __len__(self) -> int:
        return len(self._keys)
