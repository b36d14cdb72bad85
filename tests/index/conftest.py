"""Shared fixtures for index tests."""
from __future__ import annotations

import pytest

from rodmap.index.hashed import HashIndex
from rodmap.index.ordered import OrderedIndex


@pytest.fixture(params=[HashIndex, OrderedIndex], ids=["hash", "ordered"])
def index(request):
    return request.param()
