import threading
import uuid

from inputlog.capture.base import BaseTracker
from inputlog.capture.clock import MonotonicClock
from inputlog.event_source.base import BaseEventSource
from inputlog.logging.logger import Log
from inputlog.storage.models import Category, InputLog
from inputlog.storage.repositories.input_log_repository import InputLogRepository


def click_rate_content(clicks: int, interval_seconds: float) -> str:
    """Format a click count over an interval as a per-minute rate."""
    rate = clicks / (interval_seconds / 60)
    return f"ClicksPerMinute={rate:.2f}"


class MouseTracker(BaseTracker):
    """Counts clicks and logs the click rate once per interval.

    A background timer flushes every interval_seconds; stop() joins the
    timer before the final flush so no interval is counted twice.
    """

    name = "mouse"

    def __init__(
        self,
        source: BaseEventSource,
        repository: InputLogRepository,
        interval_seconds: float = 60,
        clock: MonotonicClock | None = None,
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self._source = source
        self._repository = repository
        self._interval_seconds = interval_seconds
        self._clock = clock or MonotonicClock()
        self._clicks = 0
        self._lock = threading.Lock()
        self._stop_event = threading.Event()
        self._timer: threading.Thread | None = None
        self._running = False

    @property
    def clicks(self) -> int:
        with self._lock:
            return self._clicks

    def start(self) -> None:
        self._stop_event.clear()
        self._source.start(self.on_click)
        self._running = True
        self._timer = threading.Thread(
            target=self._run_timer, name="inputlog-mouse-timer", daemon=True
        )
        self._timer.start()
        Log.info(f"Mouse tracking started, interval {self._interval_seconds}s")

    def stop(self) -> None:
        if not self._running:
            return
        self._running = False
        self._stop_event.set()
        if self._timer is not None:
            self._timer.join()
            self._timer = None
        self.flush()
        self._source.stop()
        Log.info("Mouse tracking stopped")

    def on_click(self) -> None:
        with self._lock:
            self._clicks += 1

    def flush(self) -> InputLog:
        """Log the rate for the interval just ended and reset the counter."""
        with self._lock:
            clicks = self._clicks
            self._clicks = 0
        log = InputLog(
            id=str(uuid.uuid4()),
            timestamp=self._clock.now(),
            content=click_rate_content(clicks, self._interval_seconds),
            category=Category.MOUSE,
        )
        self._repository.save(log)
        Log.debug(f"Mouse interval flushed: {log.content}")
        return log

    def _run_timer(self) -> None:
        while not self._stop_event.wait(self._interval_seconds):
            try:
                self.flush()
            except Exception as exc:
                Log.error(f"Mouse interval flush failed: {exc}")
