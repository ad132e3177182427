import threading
from contextlib import contextmanager
from typing import Dict, Iterator, List


class _Entry:
    __slots__ = ("lock", "users")

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.users = 0


class RecordLocks:
    """
    Process-wide registry of per-record locks.

    - A key's lock exists only while some caller holds or waits on it; the
      entry is dropped when the last one leaves, so the registry stays as
      small as the set of records currently being worked on.
    - hold() takes its keys in sorted order, so two callers locking the same
      pair of records can never deadlock.
    """

    def __init__(self) -> None:
        self._registry_lock = threading.Lock()
        self._entries: Dict[str, _Entry] = {}

    def __len__(self) -> int:
        with self._registry_lock:
            return len(self._entries)

    def _checkout(self, keys: List[str]) -> List[_Entry]:
        with self._registry_lock:
            entries = []
            for key in keys:
                entry = self._entries.get(key)
                if entry is None:
                    entry = _Entry()
                    self._entries[key] = entry
                entry.users += 1
                entries.append(entry)
            return entries

    def _checkin(self, keys: List[str]) -> None:
        with self._registry_lock:
            for key in keys:
                entry = self._entries[key]
                entry.users -= 1
                if entry.users == 0:
                    del self._entries[key]

    @contextmanager
    def hold(self, *keys: str) -> Iterator[None]:
        ordered = sorted(set(keys))
        entries = self._checkout(ordered)
        acquired = []
        try:
            for entry in entries:
                entry.lock.acquire()
                acquired.append(entry.lock)
            yield
        finally:
            for lock in reversed(acquired):
                lock.release()
            self._checkin(ordered)


def item_key(item_id) -> str:
    return f"item:{item_id}"


def claim_key(claim_id) -> str:
    return f"claim:{claim_id}"


CLAIM_CODES_KEY = "claim-codes"

record_locks = RecordLocks()
