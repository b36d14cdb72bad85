"""Hash-keyed index: keys need __hash__ and __eq__."""
from __future__ import annotations

from typing import TYPE_CHECKING, Any, Hashable, TypeVar

from rodmap.index.base import Entry, IndexBase

if TYPE_CHECKING:
    from rodmap.handle import Cell

K = TypeVar("K", bound=Hashable)


class HashIndex(IndexBase[K]):
    """dict-backed index. O(1) average insert, lookup and remove."""

    __slots__ = ("_entries",)

    def __init__(self) -> None:
        self._entries: dict[K, Entry[K]] = {}

    def insert(self, entry: Entry[K]) -> bool:
        replaced = self._entries.pop(entry.key, None) is not None
        # re-add so the dict holds the new entry's key object, not the old one
        self._entries[entry.key] = entry
        return not replaced

    def lookup(self, key: K) -> Entry[K] | None:
        return self._entries.get(key)

    def remove(self, key: K, expected: Cell[K, Any] | None = None) -> bool:
        entry = self._entries.get(key)
        if entry is None:
            return False
        if expected is not None and not entry.refers_to(expected):
            return False
        del self._entries[key]
        return True

    def keys(self) -> list[K]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)
