"""Tests for HashIndex and OrderedIndex.

Both flavours share one contract; the ordered index additionally keeps
its keys sorted.
"""
from __future__ import annotations

import gc
from dataclasses import dataclass

import pytest

from rodmap.handle import Cell
from rodmap.index.base import Entry
from rodmap.index.ordered import OrderedIndex


@dataclass(frozen=True, order=True)
class RoomKey:
    """Key type whose equal instances are distinct objects."""
    floor: int
    number: int


def make_cell(key, value="v") -> Cell:
    """A cell whose teardown does nothing, for index-only tests."""
    return Cell(key, value, lambda cell: None)


def test_empty_index(index):
    assert len(index) == 0
    assert index.is_empty()
    assert index.lookup(RoomKey(1, 1)) is None
    assert index.remove(RoomKey(1, 1)) is False
    assert index.keys() == []


def test_insert_lookup_remove(index):
    cell = make_cell(RoomKey(1, 1))
    assert index.insert(Entry.for_cell(cell)) is True
    assert len(index) == 1
    assert not index.is_empty()

    entry = index.lookup(RoomKey(1, 1))
    assert entry is not None
    assert entry.resolve() is cell

    assert index.remove(RoomKey(1, 1)) is True
    assert index.remove(RoomKey(1, 1)) is False
    assert index.is_empty()


def test_entry_shares_the_cell_key_object(index):
    key = RoomKey(2, 5)
    cell = make_cell(key)
    index.insert(Entry.for_cell(cell))

    # look up with an equal but distinct key object
    probe = RoomKey(2, 5)
    assert probe is not key
    entry = index.lookup(probe)
    assert entry.key is key
    assert entry.key is cell.key


def test_insert_equal_key_replaces(index):
    first = make_cell(RoomKey(3, 1), "first")
    second = make_cell(RoomKey(3, 1), "second")

    assert index.insert(Entry.for_cell(first)) is True
    assert index.insert(Entry.for_cell(second)) is False
    assert len(index) == 1

    entry = index.lookup(RoomKey(3, 1))
    assert entry.resolve() is second
    # the stored key object is the replacement's, not the original's
    assert entry.key is second.key


def test_remove_with_expected_cell(index):
    old = make_cell(RoomKey(4, 1), "old")
    new = make_cell(RoomKey(4, 1), "new")
    index.insert(Entry.for_cell(old))
    index.insert(Entry.for_cell(new))

    # a detached cell can't evict its replacement
    assert index.remove(RoomKey(4, 1), expected=old) is False
    assert len(index) == 1
    assert index.remove(RoomKey(4, 1), expected=new) is True
    assert index.is_empty()


def test_entry_does_not_keep_cell_alive(index):
    cell = make_cell(RoomKey(5, 1))
    index.insert(Entry.for_cell(cell))
    del cell
    gc.collect()

    entry = index.lookup(RoomKey(5, 1))
    assert entry is not None
    assert entry.resolve() is None


def test_many_keys(index):
    cells = [make_cell(RoomKey(f, n)) for f in range(10) for n in range(20)]
    for cell in reversed(cells):
        index.insert(Entry.for_cell(cell))
    assert len(index) == 200

    for cell in cells[::2]:
        assert index.remove(RoomKey(cell.key.floor, cell.key.number)) is True
    assert len(index) == 100
    for cell in cells[1::2]:
        assert index.lookup(cell.key).resolve() is cell


def test_ordered_keys_are_sorted():
    index = OrderedIndex()
    keys = [RoomKey(f, n) for f, n in [(3, 1), (1, 9), (2, 2), (1, 1), (3, 0)]]
    cells = [make_cell(k) for k in keys]
    for cell in cells:
        index.insert(Entry.for_cell(cell))

    assert index.keys() == sorted(keys)
    index.remove(RoomKey(2, 2))
    assert index.keys() == [RoomKey(1, 1), RoomKey(1, 9), RoomKey(3, 0), RoomKey(3, 1)]


def test_ordered_rejects_unorderable_keys():
    index = OrderedIndex()
    cell = make_cell("room")
    index.insert(Entry.for_cell(cell))
    with pytest.raises(TypeError):
        index.insert(Entry.for_cell(make_cell(101)))
    assert len(index) == 1
