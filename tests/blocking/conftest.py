"""Shared fixtures for the thread-blocking maps."""
from __future__ import annotations

import pytest

from rodmap.maps.blocking import RodBTreeMap, RodHashMap


@pytest.fixture(params=[RodHashMap, RodBTreeMap], ids=["hash", "btree"])
def map_cls(request):
    return request.param


@pytest.fixture()
def hotel(map_cls):
    return map_cls(name="hotel")
