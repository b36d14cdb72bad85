"""Read-write lock for the asyncio maps.

Same contract as ReadWriteLock (shared readers, exclusive writer,
writer preference), but read() and write() are async context managers
that suspend the calling task instead of blocking the event loop.

There is one extra door: write_blocking(). A handle's teardown runs
wherever the last reference is dropped, often in plain synchronous
code with no event loop to await on (a __del__, a finally block, a
worker thread). That path has to take the exclusive side by blocking
the current thread, so the lock state lives behind a threading.Lock
and waiters can be either asyncio futures or threading events.

Why not asyncio.Lock + asyncio.Condition? Both are bound to one event
loop and can't be acquired synchronously. Their release also goes
through the loop, which a blocking teardown can't wait for.

Caveat: write_blocking() on the event loop thread while some task is
suspended *inside* a read() or write() block deadlocks, because that
task can never resume to release. The maps never await while holding
the lock, so their own critical sections never trigger this.
"""
from __future__ import annotations

import asyncio
import threading
from contextlib import asynccontextmanager, contextmanager
from typing import AsyncIterator, Iterator


class _TaskWaiter:
    """Parks an asyncio task until the lock state changes."""

    __slots__ = ("_loop", "_future")

    def __init__(self) -> None:
        self._loop = asyncio.get_running_loop()
        self._future: asyncio.Future[None] = self._loop.create_future()

    def wake(self) -> None:
        # may be called from any thread, including a blocking teardown
        if not self._loop.is_closed():
            self._loop.call_soon_threadsafe(self._resolve)

    def _resolve(self) -> None:
        if not self._future.done():
            self._future.set_result(None)

    async def wait(self) -> None:
        await self._future


class _ThreadWaiter:
    """Parks an OS thread until the lock state changes."""

    __slots__ = ("_event",)

    def __init__(self) -> None:
        self._event = threading.Event()

    def wake(self) -> None:
        self._event.set()

    def wait(self) -> None:
        self._event.wait()


class AsyncReadWriteLock:
    """Read-write lock usable from coroutines and, for writers, from threads.

    Usage:
        lock = AsyncReadWriteLock()

        async with lock.read():
            entry = index.lookup(key)

        async with lock.write():
            index.insert(entry)

        with lock.write_blocking():   # synchronous teardown only
            index.remove(key)

    Wakeups are broadcast (every parked waiter re-checks the state),
    the same notify_all strategy as ReadWriteLock. A task cancelled
    while parked leaves the counters untouched.
    """

    def __init__(self) -> None:
        self._readers: int = 0
        self._writers_waiting: int = 0
        self._writer_active: bool = False
        self._state = threading.Lock()
        self._waiters: list[_TaskWaiter | _ThreadWaiter] = []

    # -- shared side ---------------------------------------------------

    @asynccontextmanager
    async def read(self) -> AsyncIterator[None]:
        """Acquire shared access, suspending while a writer is active or waiting."""
        while True:
            with self._state:
                if self._try_read_locked():
                    break
                waiter = _TaskWaiter()
                self._waiters.append(waiter)
            await waiter.wait()
        try:
            yield
        finally:
            self._release_read()

    # -- exclusive side ------------------------------------------------

    @asynccontextmanager
    async def write(self) -> AsyncIterator[None]:
        """Acquire exclusive access, suspending the task while it waits."""
        with self._state:
            self._writers_waiting += 1
        granted = False
        try:
            while True:
                with self._state:
                    if self._try_write_locked():
                        granted = True
                        break
                    waiter = _TaskWaiter()
                    self._waiters.append(waiter)
                await waiter.wait()
        finally:
            self._writer_stopped_waiting(granted)
        try:
            yield
        finally:
            self._release_write()

    @contextmanager
    def write_blocking(self) -> Iterator[None]:
        """Acquire exclusive access by blocking the current thread."""
        with self._state:
            self._writers_waiting += 1
        granted = False
        try:
            while True:
                with self._state:
                    if self._try_write_locked():
                        granted = True
                        break
                    waiter = _ThreadWaiter()
                    self._waiters.append(waiter)
                waiter.wait()
        finally:
            self._writer_stopped_waiting(granted)
        try:
            yield
        finally:
            self._release_write()

    # -- introspection ---------------------------------------------------

    @property
    def readers(self) -> int:
        with self._state:
            return self._readers

    @property
    def writer_active(self) -> bool:
        with self._state:
            return self._writer_active

    # -- internals (call with self._state held unless noted) -------------

    def _try_read_locked(self) -> bool:
        if self._writer_active or self._writers_waiting > 0:
            return False
        self._readers += 1
        return True

    def _try_write_locked(self) -> bool:
        if self._writer_active or self._readers > 0:
            return False
        self._writer_active = True
        return True

    def _wake_all_locked(self) -> None:
        waiters, self._waiters = self._waiters, []
        for waiter in waiters:
            waiter.wake()

    def _writer_stopped_waiting(self, granted: bool) -> None:
        with self._state:
            self._writers_waiting -= 1
            if not granted:
                # readers parked behind this writer may go now
                self._wake_all_locked()

    def _release_read(self) -> None:
        with self._state:
            self._readers -= 1
            if self._readers == 0:
                self._wake_all_locked()

    def _release_write(self) -> None:
        with self._state:
            self._writer_active = False
            self._wake_all_locked()
