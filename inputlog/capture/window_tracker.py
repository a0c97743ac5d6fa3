import uuid

from inputlog.capture.base import BaseTracker
from inputlog.capture.clock import MonotonicClock
from inputlog.event_source.base import BaseEventSource, BaseWindowInfoResolver
from inputlog.event_source.models import WindowInfo
from inputlog.event_source.process_lookup import UNKNOWN_PROCESS
from inputlog.logging.logger import Log
from inputlog.storage.models import WindowLog
from inputlog.storage.repositories.window_log_repository import WindowLogRepository


class WindowTracker(BaseTracker):
    """Logs one record per foreground-window transition."""

    name = "window"

    def __init__(
        self,
        source: BaseEventSource,
        resolver: BaseWindowInfoResolver,
        repository: WindowLogRepository,
        clock: MonotonicClock | None = None,
    ) -> None:
        self._source = source
        self._resolver = resolver
        self._repository = repository
        self._clock = clock or MonotonicClock()
        self._running = False

    def start(self) -> None:
        self._source.start(self.on_foreground)
        self._running = True
        Log.info("Window tracking started")

    def stop(self) -> None:
        if not self._running:
            return
        self._running = False
        self._source.stop()
        Log.info("Window tracking stopped")

    def on_foreground(self, window_handle: int) -> WindowLog | None:
        if not window_handle:
            return None
        info = self._resolve(window_handle)
        log = WindowLog(
            id=str(uuid.uuid4()),
            timestamp=self._clock.now(),
            window_handle=window_handle,
            window_title=info.title,
            process_name=info.process_name,
        )
        self._repository.save(log)
        Log.debug(f"Foreground window: {info.process_name} '{info.title}'")
        return log

    def _resolve(self, window_handle: int) -> WindowInfo:
        try:
            return self._resolver.resolve(window_handle)
        except Exception as exc:
            Log.warning(f"Could not resolve window {window_handle}: {exc}")
            return WindowInfo(title="", process_name=UNKNOWN_PROCESS)
