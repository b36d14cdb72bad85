"""Lock-agnostic core shared by the blocking and asyncio maps.

Every method here with a _locked suffix assumes the caller already
holds the map's lock in the right mode:

    _insert_locked   exclusive
    _get_locked      shared
    _discard_locked  exclusive

The substrate subclasses only decide *how* the lock is taken
(blocking the thread, or suspending the task).
"""
from __future__ import annotations

import logging
from typing import Any, Generic, TypeVar

from rodmap.errors import DuplicateKeyError, InvariantViolation
from rodmap.handle import Cell, Handle
from rodmap.index.base import Entry, IndexBase
from rodmap.policy import DuplicateKeyPolicy

log = logging.getLogger(__name__)

K = TypeVar("K")
V = TypeVar("V")


class RodMapCore(Generic[K, V]):
    """Index bookkeeping for a remove-on-drop map.

    Args:
        duplicate_policy: what insert() does with a key that is already
            live (default REPLACE).
        name: label used in log messages and repr().
    """

    index_factory: type[IndexBase[Any]]

    def __init__(
        self,
        duplicate_policy: DuplicateKeyPolicy = DuplicateKeyPolicy.REPLACE,
        name: str | None = None,
    ) -> None:
        self._index: IndexBase[K] = self.index_factory()
        self._duplicate_policy = duplicate_policy
        self._name = name or type(self).__name__

    @property
    def name(self) -> str:
        return self._name

    @property
    def duplicate_policy(self) -> DuplicateKeyPolicy:
        return self._duplicate_policy

    def _new_cell(self, key: K, value: V) -> Cell[K, V]:
        return Cell(key, value, self._teardown)

    def _teardown(self, cell: Cell[K, V]) -> None:
        """Take the exclusive lock, discard the entry, destroy the value."""
        raise NotImplementedError

    def _insert_locked(self, cell: Cell[K, V]) -> Handle[K, V]:
        existing = self._index.lookup(cell.key)
        if existing is not None:
            if self._duplicate_policy is DuplicateKeyPolicy.REJECT:
                raise DuplicateKeyError(cell.key)
            if self._duplicate_policy is DuplicateKeyPolicy.MERGE:
                log.debug("%s: merged insert for key %r", self._name, cell.key)
                return self._upgrade(existing)
            log.warning(
                "%s: key %r replaced; existing handles are now detached",
                self._name, cell.key,
            )
        self._index.insert(Entry.for_cell(cell))
        log.debug("%s: inserted key %r", self._name, cell.key)
        return Handle(cell)

    def _get_locked(self, key: K) -> Handle[K, V] | None:
        entry = self._index.lookup(key)
        if entry is None:
            return None
        return self._upgrade(entry)

    def _upgrade(self, entry: Entry[K]) -> Handle[K, V]:
        """Turn an indexed entry's weak link into a new strong handle."""
        cell = entry.resolve()
        if cell is None or not cell.acquire():
            log.critical(
                "%s: indexed key %r has no live value; lock discipline broken",
                self._name, entry.key,
            )
            raise InvariantViolation(entry.key)
        return Handle(cell)

    def _discard_locked(self, cell: Cell[K, V]) -> bool:
        """Drop the teardown reference. True if the value is now dead."""
        if not cell.drop_last():
            # revived by a get() that ran before we got the lock
            return False
        if self._index.remove(cell.key, expected=cell):
            log.debug("%s: removed key %r", self._name, cell.key)
        else:
            log.debug("%s: released detached value for key %r", self._name, cell.key)
        return True

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(name={self._name!r}, "
            f"policy={self._duplicate_policy.value})"
        )
