"""Per-key asyncio locks.

Operations on the same key run one at a time; different keys proceed in
parallel. Entries are reference counted and dropped once no task holds or
waits on them, so the table does not grow with every complaint ever seen.

The locks only order tasks inside one process. With several API workers
the PostgreSQL repository row-locks and merges each lifecycle write, so
no history entry is lost, but entries from different workers may land in
a different order than their ledger transactions.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncGenerator, Hashable
from contextlib import asynccontextmanager


class _Entry:
    __slots__ = ("lock", "users")

    def __init__(self) -> None:
        self.lock = asyncio.Lock()
        self.users = 0


class KeyedLock:
    """A table of asyncio locks keyed by arbitrary hashable values.

    Example:
        locks = KeyedLock()
        async with locks.hold(complaint_id):
            ...
    """

    def __init__(self) -> None:
        self._entries: dict[Hashable, _Entry] = {}

    @asynccontextmanager
    async def hold(self, key: Hashable) -> AsyncGenerator[None, None]:
        """Hold the lock for key for the duration of the block."""
        entry = self._entries.get(key)
        if entry is None:
            entry = _Entry()
            self._entries[key] = entry
        entry.users += 1
        try:
            async with entry.lock:
                yield
        finally:
            entry.users -= 1
            if entry.users == 0:
                del self._entries[key]

    def is_locked(self, key: Hashable) -> bool:
        entry = self._entries.get(key)
        return entry is not None and entry.lock.locked()

    def __len__(self) -> int:
        return len(self._entries)
