"""Per-transaction mutual exclusion for payment read-modify-write"""

import threading
from contextlib import contextmanager
from typing import Dict, Hashable, Iterator, List

from fish_ledger.domain.exceptions import TransactionBusyError


class TransactionLocks:
    """
    Registry of locks keyed by transaction id.

    Entries are reference counted and dropped once no caller holds or waits
    on them, so the registry only grows with concurrent activity.
    """

    def __init__(self, timeout_seconds: float = 5.0):
        self.timeout_seconds = timeout_seconds
        self._guard = threading.Lock()
        self._locks: Dict[Hashable, List] = {}  # key -> [Lock, users]

    @contextmanager
    def hold(self, key: Hashable) -> Iterator[None]:
        """Hold the lock for key; raises TransactionBusyError on timeout"""
        with self._guard:
            entry = self._locks.setdefault(key, [threading.Lock(), 0])
            entry[1] += 1

        acquired = entry[0].acquire(timeout=self.timeout_seconds)
        try:
            if not acquired:
                raise TransactionBusyError(
                    f"Transaction {key} is busy, retry the payment"
                )
            yield
        finally:
            if acquired:
                entry[0].release()
            with self._guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._locks[key]

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)
