import threading
from datetime import datetime, timedelta, timezone
from typing import Optional


class MonotonicClock:
    """
    Hands out UTC timestamps that never go backwards within the process.

    With strict=True every tick is at least one microsecond after the
    previous one, so the stamps also order records created in the same
    instant or across a wall-clock step back.
    """

    def __init__(self, now=None, strict: bool = False) -> None:
        self._lock = threading.Lock()
        self._last: Optional[datetime] = None
        self._now = now or (lambda: datetime.now(timezone.utc))
        self._strict = strict

    def tick(self) -> datetime:
        with self._lock:
            current = self._now()
            if self._last is not None:
                if self._strict and current <= self._last:
                    current = self._last + timedelta(microseconds=1)
                elif current < self._last:
                    current = self._last
            self._last = current
            return current


# Audit entries may share a timestamp; ties are ordered by entry id
audit_clock = MonotonicClock()

# created_at for item reports and claims, the key for creation order
record_clock = MonotonicClock(strict=True)
