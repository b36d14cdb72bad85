"""Read-write lock for the thread-blocking maps.

Shared holders (get, size, contains) run together; an exclusive holder
(insert, teardown) runs alone. Built on threading.Condition with reader
count tracking and writer preference: once a writer is waiting, new
readers block. Teardown takes the exclusive side, so a steady stream of
lookups can't keep a dead entry visible forever.

Usage:
    lock = ReadWriteLock()

    with lock.read():
        entry = index.lookup(key)

    with lock.write():
        index.remove(key)
"""
from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Iterator


class ReadWriteLock:
    """Read-write lock with writer preference.

    Neither side is reentrant. A thread holding read() that asks for
    write() (or read() again while a writer waits) deadlocks.
    """

    def __init__(self) -> None:
        self._readers: int = 0
        self._writers_waiting: int = 0
        self._writer_active: bool = False
        self._cond = threading.Condition(threading.Lock())

    @contextmanager
    def read(self) -> Iterator[None]:
        """Acquire shared access. Blocks while a writer is active or waiting."""
        with self._cond:
            while self._writer_active or self._writers_waiting > 0:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def write(self) -> Iterator[None]:
        """Acquire exclusive access. Blocks while readers or a writer hold it."""
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer_active or self._readers > 0:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer_active = True
        try:
            yield
        finally:
            with self._cond:
                self._writer_active = False
                self._cond.notify_all()

    @property
    def readers(self) -> int:
        """Number of threads currently holding shared access."""
        with self._cond:
            return self._readers

    @property
    def writer_active(self) -> bool:
        with self._cond:
            return self._writer_active
