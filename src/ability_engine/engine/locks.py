"""Per-key mutual exclusion.

Every ledger read and write for one ``(actor_id, ability_id)`` pair runs
under that pair's lock, so "check then consume" is atomic for callers while
different pairs never block one another. Locks are re-entrant, so a caster
holding the key may call back into the ledger, and they are discarded once
no thread holds or waits on them.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Generator, Hashable


class KeyedLocks:
    """A family of re-entrant locks created on demand per key.

    Example:
        >>> locks = KeyedLocks()
        >>> with locks.hold(("hero", "spell-recall")):
        ...     pass
        >>> len(locks)
        0
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[Hashable, threading.RLock] = {}
        self._users: dict[Hashable, int] = {}

    def _acquire_slot(self, key: Hashable) -> threading.RLock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.RLock()
                self._locks[key] = lock
            self._users[key] = self._users.get(key, 0) + 1
            return lock

    def _release_slot(self, key: Hashable) -> None:
        with self._guard:
            remaining = self._users[key] - 1
            if remaining:
                self._users[key] = remaining
            else:
                del self._users[key]
                del self._locks[key]

    @contextmanager
    def hold(self, key: Hashable) -> Generator[None, None, None]:
        """Hold the lock for ``key`` for the duration of the block."""
        lock = self._acquire_slot(key)
        try:
            with lock:
                yield
        finally:
            self._release_slot(key)

    def __len__(self) -> int:
        """Number of keys currently held or waited on."""
        with self._guard:
            return len(self._locks)


__all__ = [
    "KeyedLocks",
]
