"""Exception hierarchy for rodmap.

Lookups never raise for a missing key: get() returns None. The only
exceptions a caller normally sees are DuplicateKeyError (when the map
was built with DuplicateKeyPolicy.REJECT) and HandleReleasedError
(touching a handle after release()). InvariantViolation means the
locking protocol itself is broken and is never caught by the library.
"""
from __future__ import annotations


class RodMapError(Exception):
    """Base class for every error raised by rodmap."""


class InvariantViolation(RodMapError):
    """An indexed entry pointed at a value that was already torn down.

    The shared/exclusive discipline makes this impossible: a value's
    reference count only reaches zero under the exclusive lock, in the
    same critical section that removes its entry. Seeing this means a
    lock-discipline bug, and continuing would hand out dead storage.
    """

    def __init__(self, key: object) -> None:
        self.key = key
        super().__init__(
            f"Entry for key {key!r} is indexed but its value is already gone"
        )


class DuplicateKeyError(RodMapError, KeyError):
    """insert() on a live key while the map rejects duplicates."""

    def __init__(self, key: object) -> None:
        self.key = key
        super().__init__(key)

    def __str__(self) -> str:
        return f"Key {self.key!r} is already present"


class HandleReleasedError(RodMapError):
    """A handle was used after release()."""
