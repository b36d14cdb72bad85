"""Shared/exclusive locks guarding a map's index.

  - ReadWriteLock: threads block while waiting
  - AsyncReadWriteLock: tasks suspend while waiting; write_blocking()
    for synchronous teardown
"""
from rodmap.concurrency.async_rwlock import AsyncReadWriteLock
from rodmap.concurrency.rwlock import ReadWriteLock

__all__ = [
    "AsyncReadWriteLock",
    "ReadWriteLock",
]
