"""Remove-on-drop maps for asyncio code.

Same contract as the blocking maps, but insert, get and the size
queries are coroutines that suspend the task while the index lock is
contended, leaving the event loop free.

Teardown is the exception. The last handle can be released anywhere:
a with-block exit, a finally clause, garbage collection, another
thread. There is nothing to await at that point, so teardown takes the
exclusive side with AsyncReadWriteLock.write_blocking() and blocks the
releasing thread for the (short) removal.

This is safe on the event loop thread because no map operation awaits
while holding the lock: whenever synchronous code runs on the loop,
the lock is either free or held by another thread that will release it
without needing the loop.

Example:
    rooms = AsyncRodBTreeMap[str, Room]()
    room = await rooms.insert("101", Room())
    assert await rooms.size() == 1
    room.release()
    assert await rooms.is_empty()
"""
from __future__ import annotations

from typing import TypeVar

from rodmap.concurrency.async_rwlock import AsyncReadWriteLock
from rodmap.handle import Cell, Handle
from rodmap.index.hashed import HashIndex
from rodmap.index.ordered import OrderedIndex
from rodmap.maps.base import RodMapCore
from rodmap.policy import DuplicateKeyPolicy

K = TypeVar("K")
V = TypeVar("V")


class AsyncRodMap(RodMapCore[K, V]):
    """Cooperative map; subclasses choose the index."""

    def __init__(
        self,
        duplicate_policy: DuplicateKeyPolicy = DuplicateKeyPolicy.REPLACE,
        name: str | None = None,
    ) -> None:
        super().__init__(duplicate_policy=duplicate_policy, name=name)
        self._lock = AsyncReadWriteLock()

    async def insert(self, key: K, value: V) -> Handle[K, V]:
        """Store value under key and return the first handle to it."""
        cell = self._new_cell(key, value)
        async with self._lock.write():
            return self._insert_locked(cell)

    async def get(self, key: K) -> Handle[K, V] | None:
        """A new handle to the live value for key, or None."""
        async with self._lock.read():
            return self._get_locked(key)

    async def contains(self, key: K) -> bool:
        async with self._lock.read():
            return self._index.lookup(key) is not None

    async def size(self) -> int:
        async with self._lock.read():
            return len(self._index)

    async def is_empty(self) -> bool:
        async with self._lock.read():
            return self._index.is_empty()

    async def keys(self) -> list[K]:
        """Snapshot of live keys. Stale as soon as it returns."""
        async with self._lock.read():
            return self._index.keys()

    def _teardown(self, cell: Cell[K, V]) -> None:
        with self._lock.write_blocking():
            dead = self._discard_locked(cell)
        if dead:
            cell.destroy()


class AsyncRodHashMap(AsyncRodMap[K, V]):
    """Cooperative map over a hash index. Keys must be hashable."""

    index_factory = HashIndex


class AsyncRodBTreeMap(AsyncRodMap[K, V]):
    """Cooperative map over an ordered index. Keys must be totally ordered."""

    index_factory = OrderedIndex
