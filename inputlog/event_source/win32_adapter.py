"""Windows foreground-window hook.

Uses SetWinEventHook(EVENT_SYSTEM_FOREGROUND) out of context on a dedicated
thread running a message loop, plus user32 lookups and psutil for metadata.
"""

import ctypes
import sys
import threading
from collections.abc import Callable
from ctypes import wintypes

from inputlog.event_source.base import BaseEventSource, BaseWindowInfoResolver
from inputlog.event_source.exceptions import HookRegistrationError, UnsupportedPlatformError
from inputlog.event_source.models import WindowInfo
from inputlog.event_source.process_lookup import process_name_for
from inputlog.logging.logger import Log

EVENT_SYSTEM_FOREGROUND = 0x0003
WINEVENT_OUTOFCONTEXT = 0x0000
OBJID_WINDOW = 0
CHILDID_SELF = 0
WM_QUIT = 0x0012

_REGISTRATION_TIMEOUT_SECONDS = 5.0


def _require_windows() -> None:
    if sys.platform != "win32":
        raise UnsupportedPlatformError(f"Win32 window hooks are not available on {sys.platform}")


class Win32ForegroundSource(BaseEventSource):
    """Delivers the handle of each window that becomes foreground."""

    def __init__(self) -> None:
        _require_windows()
        self._handler: Callable[[int], None] | None = None
        self._thread: threading.Thread | None = None
        self._thread_id: int | None = None
        self._ready = threading.Event()
        self._error: BaseException | None = None
        self._callback: object | None = None

    def start(self, handler: Callable[..., None]) -> None:
        self._handler = handler
        self._ready.clear()
        self._error = None
        thread = threading.Thread(target=self._run, name="inputlog-foreground-hook", daemon=True)
        thread.start()
        if not self._ready.wait(timeout=_REGISTRATION_TIMEOUT_SECONDS):
            raise HookRegistrationError("Timed out registering foreground window hook")
        if self._error is not None:
            raise HookRegistrationError(f"Failed to set WinEventHook: {self._error}")
        self._thread = thread
        Log.info("Window hook registered")

    def stop(self) -> None:
        if self._thread is None or self._thread_id is None:
            return
        ctypes.windll.user32.PostThreadMessageW(self._thread_id, WM_QUIT, 0, 0)
        self._thread.join(timeout=_REGISTRATION_TIMEOUT_SECONDS)
        self._thread = None
        self._thread_id = None
        Log.info("Window hook released")

    def _run(self) -> None:
        user32 = ctypes.windll.user32
        user32.SetWinEventHook.restype = wintypes.HANDLE
        user32.UnhookWinEvent.argtypes = [wintypes.HANDLE]
        self._thread_id = ctypes.windll.kernel32.GetCurrentThreadId()

        win_event_proc = ctypes.WINFUNCTYPE(
            None,
            wintypes.HANDLE,
            wintypes.DWORD,
            wintypes.HWND,
            wintypes.LONG,
            wintypes.LONG,
            wintypes.DWORD,
            wintypes.DWORD,
        )
        # The ctypes callback must outlive the hook or Windows calls freed memory.
        self._callback = win_event_proc(self._on_event)
        hook = user32.SetWinEventHook(
            EVENT_SYSTEM_FOREGROUND,
            EVENT_SYSTEM_FOREGROUND,
            0,
            self._callback,
            0,
            0,
            WINEVENT_OUTOFCONTEXT,
        )
        if not hook:
            self._error = ctypes.WinError()
            self._ready.set()
            return
        self._ready.set()

        msg = wintypes.MSG()
        try:
            while user32.GetMessageW(ctypes.byref(msg), 0, 0, 0) > 0:
                user32.TranslateMessage(ctypes.byref(msg))
                user32.DispatchMessageW(ctypes.byref(msg))
        finally:
            user32.UnhookWinEvent(hook)

    def _on_event(
        self,
        hook: int,
        event_type: int,
        hwnd: int | None,
        id_object: int,
        id_child: int,
        event_thread: int,
        event_time: int,
    ) -> None:
        _ = hook, event_thread, event_time
        if event_type != EVENT_SYSTEM_FOREGROUND:
            return
        if id_object != OBJID_WINDOW or id_child != CHILDID_SELF or not hwnd:
            return
        if self._handler is None:
            return
        try:
            self._handler(int(hwnd))
        except Exception as exc:
            Log.error(f"Foreground handler failed: {exc}")


class Win32WindowInfoResolver(BaseWindowInfoResolver):
    """Reads window title and owning process via user32 and psutil."""

    def __init__(self) -> None:
        _require_windows()

    def resolve(self, window_handle: int) -> WindowInfo:
        user32 = ctypes.windll.user32
        hwnd = wintypes.HWND(window_handle)

        title = ""
        length = user32.GetWindowTextLengthW(hwnd)
        if length > 0:
            buffer = ctypes.create_unicode_buffer(length + 1)
            if user32.GetWindowTextW(hwnd, buffer, length + 1) > 0:
                title = buffer.value

        pid = wintypes.DWORD()
        user32.GetWindowThreadProcessId(hwnd, ctypes.byref(pid))
        return WindowInfo(title=title, process_name=process_name_for(pid.value))
