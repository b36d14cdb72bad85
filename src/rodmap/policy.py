"""What insert() does when the key already has a live entry."""
from __future__ import annotations

from enum import Enum


class DuplicateKeyPolicy(Enum):
    """Duplicate-key behaviour for insert().

    REPLACE: the new entry takes the key's slot in the index. Handles to
        the old value stay valid but are detached: releasing them no
        longer touches the map.
    REJECT: raise DuplicateKeyError and leave the map unchanged.
    MERGE: keep the existing value, drop the new one, and return a fresh
        handle to the existing value.
    """

    REPLACE = "replace"
    REJECT = "reject"
    MERGE = "merge"
