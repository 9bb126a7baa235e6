"""Keyed critical sections for allocation writes"""

import asyncio
from contextlib import asynccontextmanager
from typing import Hashable, Iterable
import weakref


class KeyedLocks:
    """
    One asyncio.Lock per key, created on demand and dropped once unused.

    ``hold`` takes several keys in sorted order so that two writers whose
    windows span the same pair of dates cannot deadlock.
    """

    def __init__(self):
        self._locks: "weakref.WeakValueDictionary[Hashable, asyncio.Lock]" = weakref.WeakValueDictionary()

    def lock_for(self, key: Hashable) -> asyncio.Lock:
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        return lock

    @asynccontextmanager
    async def hold(self, keys: Iterable[Hashable]):
        locks = [self.lock_for(key) for key in sorted(set(keys))]
        acquired = []
        try:
            for lock in locks:
                await lock.acquire()
                acquired.append(lock)
            yield
        finally:
            for lock in reversed(acquired):
                lock.release()


# process-wide registry keyed by (layout_id, local date)
allocation_locks = KeyedLocks()
