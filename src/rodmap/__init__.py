"""Remove-on-drop concurrent maps.

A map entry lives exactly as long as someone holds a handle to its
value. Release the last handle and the entry removes itself, under the
map's exclusive lock, before the value is dropped. Lookups run under
the shared lock, so they see either a live value or nothing.

Public API:
    RodHashMap, RodBTreeMap: thread-blocking maps (hashed / ordered keys)
    AsyncRodHashMap, AsyncRodBTreeMap: asyncio maps (hashed / ordered keys)
    Handle: reference-counted, read-only access to a stored value
    DuplicateKeyPolicy: REPLACE / REJECT / MERGE for insert() on a live key
    RodMapError, InvariantViolation, DuplicateKeyError, HandleReleasedError
"""
from rodmap.errors import (
    DuplicateKeyError,
    HandleReleasedError,
    InvariantViolation,
    RodMapError,
)
from rodmap.handle import Handle
from rodmap.maps.blocking import RodBTreeMap, RodHashMap
from rodmap.maps.cooperative import AsyncRodBTreeMap, AsyncRodHashMap
from rodmap.policy import DuplicateKeyPolicy

__all__ = [
    "AsyncRodBTreeMap",
    "AsyncRodHashMap",
    "DuplicateKeyError",
    "DuplicateKeyPolicy",
    "Handle",
    "HandleReleasedError",
    "InvariantViolation",
    "RodBTreeMap",
    "RodHashMap",
    "RodMapError",
]
