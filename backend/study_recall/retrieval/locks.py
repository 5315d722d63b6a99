"""Per-collection reader/writer locking."""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager, contextmanager
from typing import AsyncIterator, Iterator


class ReadWriteLock:
    """Many concurrent readers or a single writer; waiting writers block new readers."""

    def __init__(self) -> None:
        self._cond = asyncio.Condition()
        self._readers = 0
        self._writer = False
        self._waiting_writers = 0

    @asynccontextmanager
    async def read(self) -> AsyncIterator[None]:
        async with self._cond:
            await self._cond.wait_for(lambda: not self._writer and self._waiting_writers == 0)
            self._readers += 1
        try:
            yield
        finally:
            async with self._cond:
                self._readers -= 1
                self._cond.notify_all()

    @asynccontextmanager
    async def write(self) -> AsyncIterator[None]:
        async with self._cond:
            self._waiting_writers += 1
            try:
                await self._cond.wait_for(lambda: not self._writer and self._readers == 0)
            finally:
                self._waiting_writers -= 1
                self._cond.notify_all()
            self._writer = True
        try:
            yield
        finally:
            async with self._cond:
                self._writer = False
                self._cond.notify_all()


class CollectionLocks:
    """One lock per collection key, kept only while someone holds or awaits it."""

    def __init__(self) -> None:
        self._locks: dict[str, ReadWriteLock] = {}
        self._holders: dict[str, int] = {}

    def __len__(self) -> int:
        return len(self._locks)

    @asynccontextmanager
    async def read(self, collection_key: str) -> AsyncIterator[None]:
        with self._hold(collection_key) as lock:
            async with lock.read():
                yield

    @asynccontextmanager
    async def write(self, collection_key: str) -> AsyncIterator[None]:
        with self._hold(collection_key) as lock:
            async with lock.write():
                yield

    @contextmanager
    def _hold(self, collection_key: str) -> Iterator[ReadWriteLock]:
        lock = self._locks.get(collection_key)
        if lock is None:
            lock = self._locks[collection_key] = ReadWriteLock()
        self._holders[collection_key] = self._holders.get(collection_key, 0) + 1
        try:
            yield lock
        finally:
            remaining = self._holders[collection_key] - 1
            if remaining:
                self._holders[collection_key] = remaining
            else:
                del self._holders[collection_key]
                del self._locks[collection_key]


__all__ = ["ReadWriteLock", "CollectionLocks"]
