"""In-process event source adapter.

No OS hooks. Events are pushed with emit(), so tests and
development can drive trackers without a desktop session.
"""

from collections.abc import Callable

from inputlog.event_source.base import BaseEventSource, BaseWindowInfoResolver
from inputlog.event_source.models import WindowInfo


class ManualEventSource(BaseEventSource):
    """Delivers events passed to emit() while started."""

    def __init__(self) -> None:
        self._handler: Callable[..., None] | None = None

    @property
    def is_running(self) -> bool:
        return self._handler is not None

    def start(self, handler: Callable[..., None]) -> None:
        self._handler = handler

    def stop(self) -> None:
        self._handler = None

    def emit(self, *args: object) -> None:
        if self._handler is not None:
            self._handler(*args)


class ManualWindowInfoResolver(BaseWindowInfoResolver):
    """Looks windows up in a fixed table."""

    def __init__(self, windows: dict[int, WindowInfo] | None = None) -> None:
        self._windows = dict(windows or {})

    def register(self, window_handle: int, info: WindowInfo) -> None:
        self._windows[window_handle] = info

    def resolve(self, window_handle: int) -> WindowInfo:
        return self._windows.get(window_handle, WindowInfo(title="", process_name="N/A"))
