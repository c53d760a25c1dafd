"""Per-key mutual exclusion for ledger and order mutations.

Locks are re-entrant so a caller already holding a batch (the allocation
engine during commit) can go back through the ledger's own locked
operations. Several keys are always taken in sorted order.
"""

from __future__ import annotations

import threading
from collections.abc import Iterable, Iterator
from contextlib import ExitStack, contextmanager

from stockroom.domain.exceptions import ConflictError


class KeyedLocks:

    def __init__(self, timeout: float = 5.0) -> None:
        self._timeout = timeout
        self._guard = threading.Lock()
        self._locks: dict[str, threading.RLock] = {}

    @contextmanager
    def hold(self, keys: Iterable[str]) -> Iterator[None]:
        """Acquire every key's lock, smallest key first.

        Raises ConflictError if any lock cannot be taken within the
        timeout; locks taken so far are released.
        """
        with ExitStack() as stack:
            for key in sorted(set(keys)):
                lock = self._lock_for(key)
                if not lock.acquire(timeout=self._timeout):
                    raise ConflictError(f"Timed out waiting for lock on '{key}'")
                stack.callback(lock.release)
            yield

    def _lock_for(self, key: str) -> threading.RLock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.RLock()
                self._locks[key] = lock
            return lock
