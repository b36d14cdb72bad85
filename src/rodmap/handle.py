"""Handles: reference-counted, read-only access to a stored value.

Layout:
    Handle ──strong──▶ Cell ◀──weak── Entry (in the index)
    Handle ──strong──▶ Cell
                       │ key   (same object as Entry.key)
                       │ value
                       │ count (one per live Handle)
                       └ teardown callback (the owning map)

Every Handle owns exactly one unit of the cell's count. clone() adds a
unit, release() gives one back. The release that takes the count to
zero runs the map's teardown: take the exclusive lock, drop the entry,
unlock, then drop the value.

The count only ever reaches zero while the map's exclusive lock is held.
Releases that leave other holders behind take a fast path on the cell's
own small lock; the one that might be last goes through the map, which
re-checks under the exclusive lock. A get() holding the shared lock
therefore always finds a live cell behind an indexed entry.

Release is explicit (release() or a with-block) and also automatic: a
weakref.finalize hook releases a Handle that gets garbage collected
without one. Under CPython's reference counting that happens as soon as
the last Python reference to the Handle object disappears.
"""
from __future__ import annotations

import threading
import weakref
from typing import Callable, Generic, TypeVar

from rodmap.errors import HandleReleasedError

K = TypeVar("K")
V = TypeVar("V")


class Cell(Generic[K, V]):
    """Shared allocation behind all clones of one handle."""

    __slots__ = ("key", "_value", "_count", "_lock", "_teardown", "__weakref__")

    def __init__(
        self,
        key: K,
        value: V,
        teardown: Callable[[Cell[K, V]], None],
    ) -> None:
        self.key = key
        self._value: V | None = value
        self._count = 1
        self._lock = threading.Lock()
        self._teardown = teardown

    @property
    def value(self) -> V:
        return self._value  # type: ignore[return-value]

    @property
    def count(self) -> int:
        with self._lock:
            return self._count

    def acquire(self) -> bool:
        """Add one strong reference. False if the cell is already dead."""
        with self._lock:
            if self._count == 0:
                return False
            self._count += 1
            return True

    def release(self) -> None:
        """Give back one strong reference, tearing down if it was the last."""
        with self._lock:
            if self._count > 1:
                self._count -= 1
                return
        self._teardown(self)

    def drop_last(self) -> bool:
        """Decrement for the teardown path. True if the count hit zero.

        Only the owning map calls this, with its exclusive lock held.
        Between release() seeing a count of 1 and the map getting the
        lock, a get() may have revived the cell; then this just
        decrements and the entry stays.
        """
        with self._lock:
            self._count -= 1
            return self._count == 0

    def destroy(self) -> None:
        """Drop the value. Called once, after the entry left the index."""
        self._value = None


class Handle(Generic[K, V]):
    """Read-only capability for one stored value.

    Usage:
        with rooms.insert("101", Room()) as room:
            room.value.book()
        # entry for "101" is gone here unless someone cloned the handle

    Clones share the value and the teardown obligation; the entry is
    removed when the last clone is released.
    """

    __slots__ = ("_cell", "_finalizer", "__weakref__")

    def __init__(self, cell: Cell[K, V]) -> None:
        # the caller has already counted this handle in cell
        self._cell = cell
        self._finalizer = weakref.finalize(self, cell.release)
        self._finalizer.atexit = False

    @property
    def value(self) -> V:
        """The stored value. Raises HandleReleasedError after release()."""
        self._check_alive()
        return self._cell.value

    @property
    def key(self) -> K:
        return self._cell.key

    @property
    def released(self) -> bool:
        return not self._finalizer.alive

    def clone(self) -> Handle[K, V]:
        """Another handle to the same value, keeping the entry alive."""
        self._check_alive()
        # can't fail: this handle's own unit keeps the count above zero
        self._cell.acquire()
        return Handle(self._cell)

    def release(self) -> None:
        """Give up this handle. Idempotent; later calls do nothing."""
        self._finalizer()

    def same_value(self, other: Handle[K, V]) -> bool:
        """True if both handles point at the same stored value."""
        return self._cell is other._cell

    def _check_alive(self) -> None:
        if not self._finalizer.alive:
            raise HandleReleasedError(
                f"Handle for key {self._cell.key!r} was already released"
            )

    def __enter__(self) -> Handle[K, V]:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()

    def __repr__(self) -> str:
        state = "released" if self.released else "live"
        return f"Handle(key={self._cell.key!r}, {state})"
