"""Remove-on-drop maps for threaded code.

Every operation blocks the calling thread while it waits for the
index lock:

    get / size / contains / keys   shared   (run concurrently)
    insert / teardown              exclusive

Example:
    sessions = RodHashMap[str, Session]()
    handle = sessions.insert("conn-42", Session())
    assert len(sessions) == 1
    assert sessions.get("conn-42").value is handle.value
    handle.release()
    assert sessions.is_empty()

Teardown runs on whichever thread releases the last handle, so a
release() call can block briefly behind other writers.
"""
from __future__ import annotations

from typing import TypeVar

from rodmap.concurrency.rwlock import ReadWriteLock
from rodmap.handle import Cell, Handle
from rodmap.index.hashed import HashIndex
from rodmap.index.ordered import OrderedIndex
from rodmap.maps.base import RodMapCore
from rodmap.policy import DuplicateKeyPolicy

K = TypeVar("K")
V = TypeVar("V")


class BlockingRodMap(RodMapCore[K, V]):
    """Thread-blocking map; subclasses choose the index."""

    def __init__(
        self,
        duplicate_policy: DuplicateKeyPolicy = DuplicateKeyPolicy.REPLACE,
        name: str | None = None,
    ) -> None:
        super().__init__(duplicate_policy=duplicate_policy, name=name)
        self._lock = ReadWriteLock()

    def insert(self, key: K, value: V) -> Handle[K, V]:
        """Store value under key and return the first handle to it."""
        cell = self._new_cell(key, value)
        with self._lock.write():
            return self._insert_locked(cell)

    def get(self, key: K) -> Handle[K, V] | None:
        """A new handle to the live value for key, or None."""
        with self._lock.read():
            return self._get_locked(key)

    def contains(self, key: K) -> bool:
        with self._lock.read():
            return self._index.lookup(key) is not None

    def size(self) -> int:
        with self._lock.read():
            return len(self._index)

    def is_empty(self) -> bool:
        with self._lock.read():
            return self._index.is_empty()

    def keys(self) -> list[K]:
        """Snapshot of live keys. Stale as soon as it returns."""
        with self._lock.read():
            return self._index.keys()

    def __len__(self) -> int:
        return self.size()

    def __contains__(self, key: object) -> bool:
        return self.contains(key)  # type: ignore[arg-type]

    def _teardown(self, cell: Cell[K, V]) -> None:
        with self._lock.write():
            dead = self._discard_locked(cell)
        if dead:
            cell.destroy()


class RodHashMap(BlockingRodMap[K, V]):
    """Blocking map over a hash index. Keys must be hashable."""

    index_factory = HashIndex


class RodBTreeMap(BlockingRodMap[K, V]):
    """Blocking map over an ordered index. Keys must be totally ordered."""

    index_factory = OrderedIndex
