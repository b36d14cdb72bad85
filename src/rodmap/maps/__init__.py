"""The four remove-on-drop map variants.

                  hashed keys          ordered keys
    blocking      RodHashMap           RodBTreeMap
    asyncio       AsyncRodHashMap      AsyncRodBTreeMap
"""
from rodmap.maps.blocking import BlockingRodMap, RodBTreeMap, RodHashMap
from rodmap.maps.cooperative import AsyncRodBTreeMap, AsyncRodHashMap, AsyncRodMap

__all__ = [
    "AsyncRodBTreeMap",
    "AsyncRodHashMap",
    "AsyncRodMap",
    "BlockingRodMap",
    "RodBTreeMap",
    "RodHashMap",
]
