"""Shared fixtures for the asyncio maps.

Requires: pip install pytest-asyncio
"""
from __future__ import annotations

import pytest

from rodmap.maps.cooperative import AsyncRodBTreeMap, AsyncRodHashMap


@pytest.fixture(params=[AsyncRodHashMap, AsyncRodBTreeMap], ids=["hash", "btree"])
def async_map_cls(request):
    return request.param


@pytest.fixture()
def async_hotel(async_map_cls):
    return async_map_cls(name="async-hotel")
