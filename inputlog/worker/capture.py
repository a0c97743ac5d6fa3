import threading

from inputlog.capture.base import BaseTracker
from inputlog.capture.keyboard_tracker import KeyboardTracker
from inputlog.capture.mouse_tracker import MouseTracker
from inputlog.capture.window_tracker import WindowTracker
from inputlog.config.settings import Settings
from inputlog.event_source.factory import EventSourceFactory
from inputlog.logging.logger import Log
from inputlog.obfuscation.rot13 import Rot13Obfuscator
from inputlog.storage.async_writer import AsyncWriter
from inputlog.storage.file_store import FileStore
from inputlog.storage.repositories.input_log_repository import InputLogRepository
from inputlog.storage.repositories.window_log_repository import WindowLogRepository


class CaptureService:
    """Long-running capture role: start trackers, wait for a stop request, flush, drain.

    Shutdown order matters: every tracker flushes its buffered state before
    the writer drains, so nothing flushed is left unwritten.
    """

    def __init__(
        self,
        trackers: list[BaseTracker],
        writer: AsyncWriter,
        drain_timeout_seconds: float | None = None,
    ) -> None:
        self._trackers = trackers
        self._writer = writer
        self._drain_timeout_seconds = drain_timeout_seconds
        self._started: list[BaseTracker] = []
        self._stop_event = threading.Event()
        self._stopped = False

    def start(self) -> None:
        """Start every tracker.

        Raises:
            HookRegistrationError: if a tracker fails to register. Trackers
                already started are stopped and the writer drained first.
        """
        for tracker in self._trackers:
            try:
                tracker.start()
            except Exception as exc:
                Log.error(f"Failed to start {tracker.name} tracking: {exc}")
                self.stop()
                raise
            self._started.append(tracker)
        Log.info(f"Capture started: {', '.join(t.name for t in self._started)}")

    def run(self) -> None:
        """Start, then block until request_stop() or KeyboardInterrupt."""
        self.start()
        try:
            while not self._stop_event.wait(1.0):
                pass
        except KeyboardInterrupt:
            Log.info("Capture interrupted")
        finally:
            self.stop()

    def request_stop(self) -> None:
        self._stop_event.set()

    def stop(self) -> int:
        """Flush and stop started trackers, then drain pending writes.

        Returns the number of writes abandoned at the drain timeout.
        """
        if self._stopped:
            return 0
        self._stopped = True
        for tracker in reversed(self._started):
            try:
                tracker.stop()
            except Exception as exc:
                Log.error(f"Failed to stop {tracker.name} tracking: {exc}")
        self._started.clear()
        abandoned = self._writer.drain(self._drain_timeout_seconds)
        if abandoned:
            Log.error(f"Capture stopped with {abandoned} abandoned writes")
        else:
            Log.info("Capture stopped, all writes flushed")
        return abandoned


def build_capture_service(settings: Settings, store: FileStore) -> CaptureService:
    """Build a CaptureService over the configured event sources."""
    sources = EventSourceFactory.create(settings)
    writer = AsyncWriter("capture")
    log_repo = InputLogRepository(store, writer)
    trackers: list[BaseTracker] = [
        KeyboardTracker(sources.keyboard, log_repo, Rot13Obfuscator()),
        MouseTracker(sources.mouse, log_repo, settings.mouse_interval_seconds),
    ]
    if sources.window is not None and sources.window_resolver is not None:
        trackers.append(
            WindowTracker(sources.window, sources.window_resolver, WindowLogRepository(store, writer))
        )
    return CaptureService(trackers, writer, settings.shutdown_drain_timeout_seconds)
