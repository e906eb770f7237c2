"""
Per-(item, date) admission locks.

Two layers, both keyed by (item_id, booking_date):
  - KeyedMutex: in-process, one threading.Lock per key, reference counted so
    idle keys are dropped. Serializes worker threads of one API process.
  - advisory_key(): a stable signed 64-bit key for pg_advisory_xact_lock,
    which serializes across processes on Postgres.

Different keys never contend.
"""

import hashlib
import logging
import threading
import uuid
from collections.abc import Hashable, Iterator
from contextlib import contextmanager
from datetime import date

logger = logging.getLogger(__name__)


class KeyedMutex:
    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[Hashable, threading.Lock] = {}
        self._refs: dict[Hashable, int] = {}

    @contextmanager
    def hold(self, key: Hashable) -> Iterator[None]:
        with self._guard:
            lock = self._locks.setdefault(key, threading.Lock())
            self._refs[key] = self._refs.get(key, 0) + 1
        lock.acquire()
        try:
            yield
        finally:
            lock.release()
            with self._guard:
                self._refs[key] -= 1
                if self._refs[key] == 0:
                    del self._refs[key]
                    del self._locks[key]

    def active_keys(self) -> int:
        with self._guard:
            return len(self._locks)


# Shared by every session in this process
admission_mutex = KeyedMutex()


def advisory_key(item_id: uuid.UUID, booking_date: date) -> int:
    """Deterministic across processes (unlike hash(), which is salted per process)."""
    digest = hashlib.blake2b(
        f"booking:{item_id}:{booking_date.isoformat()}".encode(), digest_size=8
    ).digest()
    return int.from_bytes(digest, "big", signed=True)
