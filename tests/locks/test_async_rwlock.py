"""Tests for AsyncReadWriteLock.

Covers: shared readers across tasks, writer exclusion, writer
preference, cancellation while parked, and the blocking writer path
used by teardown (from a worker thread).
"""
from __future__ import annotations

import asyncio
import threading

import pytest

from rodmap.concurrency.async_rwlock import AsyncReadWriteLock


@pytest.mark.asyncio
async def test_readers_share_the_lock():
    lock = AsyncReadWriteLock()
    all_in = asyncio.Event()
    peak = 0

    async def reader():
        nonlocal peak
        async with lock.read():
            peak = max(peak, lock.readers)
            if lock.readers == 5:
                all_in.set()
            await asyncio.wait_for(all_in.wait(), timeout=5.0)

    await asyncio.gather(*(reader() for _ in range(5)))
    assert peak == 5
    assert lock.readers == 0


@pytest.mark.asyncio
async def test_writer_excludes_readers():
    lock = AsyncReadWriteLock()
    writer_in = asyncio.Event()
    writer_release = asyncio.Event()
    reader_in = asyncio.Event()

    async def writer():
        async with lock.write():
            writer_in.set()
            await writer_release.wait()

    async def reader():
        async with lock.read():
            reader_in.set()

    wt = asyncio.create_task(writer())
    await writer_in.wait()
    rt = asyncio.create_task(reader())

    await asyncio.sleep(0.05)
    assert not reader_in.is_set()
    assert lock.writer_active

    writer_release.set()
    await asyncio.wait_for(asyncio.gather(wt, rt), timeout=5.0)
    assert reader_in.is_set()
    assert not lock.writer_active


@pytest.mark.asyncio
async def test_waiting_writer_goes_before_late_readers():
    lock = AsyncReadWriteLock()
    first_in = asyncio.Event()
    first_release = asyncio.Event()
    order: list[str] = []

    async def first_reader():
        async with lock.read():
            first_in.set()
            await first_release.wait()

    async def writer():
        async with lock.write():
            order.append("writer")

    async def late_reader():
        async with lock.read():
            order.append("reader")

    t1 = asyncio.create_task(first_reader())
    await first_in.wait()
    tw = asyncio.create_task(writer())
    await asyncio.sleep(0.01)
    t2 = asyncio.create_task(late_reader())
    await asyncio.sleep(0.01)
    assert order == []

    first_release.set()
    await asyncio.wait_for(asyncio.gather(t1, tw, t2), timeout=5.0)
    assert order == ["writer", "reader"]


@pytest.mark.asyncio
async def test_cancelled_writer_unblocks_readers():
    """A writer cancelled while parked must not keep readers out."""
    lock = AsyncReadWriteLock()
    holder_in = asyncio.Event()
    holder_release = asyncio.Event()

    async def holder():
        async with lock.read():
            holder_in.set()
            await holder_release.wait()

    async def writer():
        async with lock.write():
            pass

    th = asyncio.create_task(holder())
    await holder_in.wait()
    tw = asyncio.create_task(writer())
    await asyncio.sleep(0.01)

    tw.cancel()
    with pytest.raises(asyncio.CancelledError):
        await tw

    # with the writer gone, a new reader gets in next to the holder
    async with lock.read():
        assert lock.readers == 2

    holder_release.set()
    await th
    assert lock.readers == 0
    assert not lock.writer_active


@pytest.mark.asyncio
async def test_write_blocking_waits_for_reader_task():
    lock = AsyncReadWriteLock()
    reader_in = asyncio.Event()
    reader_release = asyncio.Event()
    writer_in = threading.Event()

    async def reader():
        async with lock.read():
            reader_in.set()
            await reader_release.wait()

    def blocking_writer():
        with lock.write_blocking():
            writer_in.set()

    rt = asyncio.create_task(reader())
    await reader_in.wait()

    loop = asyncio.get_running_loop()
    fut = loop.run_in_executor(None, blocking_writer)
    await asyncio.sleep(0.1)
    assert not writer_in.is_set(), "blocking writer got in next to a reader"

    reader_release.set()
    await asyncio.wait_for(fut, timeout=5.0)
    await rt
    assert writer_in.is_set()
    assert not lock.writer_active


@pytest.mark.asyncio
async def test_thread_writer_wakes_parked_task():
    """A task parked behind a blocking writer is woken from the other thread."""
    lock = AsyncReadWriteLock()
    writer_in = threading.Event()
    writer_release = threading.Event()

    def blocking_writer():
        with lock.write_blocking():
            writer_in.set()
            writer_release.wait(timeout=5.0)

    loop = asyncio.get_running_loop()
    fut = loop.run_in_executor(None, blocking_writer)
    await loop.run_in_executor(None, writer_in.wait, 5.0)

    async def reader():
        async with lock.read():
            return "read"

    rt = asyncio.create_task(reader())
    await asyncio.sleep(0.05)
    assert not rt.done()

    writer_release.set()
    assert await asyncio.wait_for(rt, timeout=5.0) == "read"
    await fut
