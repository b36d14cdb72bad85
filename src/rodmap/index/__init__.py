"""Key indexes behind the maps.

    HashIndex: dict-backed, keys must be hashable
    OrderedIndex: sorted lists + bisect, keys must be totally ordered
"""
from rodmap.index.base import Entry, IndexBase
from rodmap.index.hashed import HashIndex
from rodmap.index.ordered import OrderedIndex

__all__ = [
    "Entry",
    "HashIndex",
    "IndexBase",
    "OrderedIndex",
]
