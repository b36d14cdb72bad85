"""Index records and the interface both index flavours implement.

An Entry pairs the key with a weak reference to the value's cell. The
key object is the very same one the cell holds (never a copy), and the
weak reference never keeps the value alive: once every handle is gone,
nothing in the index can resurrect it.

Indexes are plain, unsynchronised collections. The owning map wraps
every call in its read-write lock.
"""
from __future__ import annotations

import weakref
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Generic, TypeVar

if TYPE_CHECKING:
    from rodmap.handle import Cell

K = TypeVar("K")


@dataclass(frozen=True, slots=True)
class Entry(Generic[K]):
    """Index record: shared key plus a non-owning link to the value cell."""
    key: K
    ref: weakref.ReferenceType[Cell[K, Any]]

    @classmethod
    def for_cell(cls, cell: Cell[K, Any]) -> Entry[K]:
        return cls(key=cell.key, ref=weakref.ref(cell))

    def resolve(self) -> Cell[K, Any] | None:
        """The cell if it has not been collected yet, else None."""
        return self.ref()

    def refers_to(self, cell: Cell[K, Any]) -> bool:
        return self.ref() is cell


class IndexBase(ABC, Generic[K]):
    """Unique-keyed set of entries with lookup and removal by equal key.

    Lookup and removal accept any key equal to the stored one; the caller
    doesn't need the entry's own key object.
    """

    __slots__ = ()

    @abstractmethod
    def insert(self, entry: Entry[K]) -> bool:
        """Store entry. True if the key was new, False if it replaced one."""
        ...

    @abstractmethod
    def lookup(self, key: K) -> Entry[K] | None:
        """Return the entry stored under key, or None."""
        ...

    @abstractmethod
    def remove(self, key: K, expected: Cell[K, Any] | None = None) -> bool:
        """Remove the entry for key. Returns True if something was removed.

        With expected set, only remove when the stored entry points at
        that exact cell. A handle detached by a later insert of the same
        key must not evict its replacement.
        """
        ...

    @abstractmethod
    def keys(self) -> list[K]:
        """Snapshot of stored keys."""
        ...

    @abstractmethod
    def __len__(self) -> int:
        ...

    def is_empty(self) -> bool:
        return len(self) == 0
