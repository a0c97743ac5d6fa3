import threading
from datetime import datetime


class MonotonicClock:
    """Local wall-clock timestamps that never go backwards within one process."""

    def __init__(self) -> None:
        self._last: datetime | None = None
        self._lock = threading.Lock()

    def now(self) -> datetime:
        current = datetime.now().astimezone()
        with self._lock:
            if self._last is not None and current < self._last:
                current = self._last
            self._last = current
        return current
