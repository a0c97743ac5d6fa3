import sys
from dataclasses import dataclass

from inputlog.config.settings import Settings
from inputlog.event_source.base import BaseEventSource, BaseWindowInfoResolver
from inputlog.event_source.exceptions import HookRegistrationError
from inputlog.event_source.manual_adapter import ManualEventSource, ManualWindowInfoResolver
from inputlog.logging.logger import Log


@dataclass
class CaptureSources:
    """Event sources for one capture role; window tracking may be unavailable."""

    keyboard: BaseEventSource
    mouse: BaseEventSource
    window: BaseEventSource | None = None
    window_resolver: BaseWindowInfoResolver | None = None


class EventSourceFactory:
    """Creates the configured event source adapters."""

    ENGINES = ("pynput", "manual")

    @classmethod
    def create(cls, settings: Settings) -> CaptureSources:
        engine = settings.event_source.lower()
        if engine == "manual":
            return CaptureSources(
                keyboard=ManualEventSource(),
                mouse=ManualEventSource(),
                window=ManualEventSource(),
                window_resolver=ManualWindowInfoResolver(),
            )
        if engine == "pynput":
            return cls._create_pynput()
        raise ValueError(f"Unknown event source '{engine}'. Choose from: {list(cls.ENGINES)}")

    @classmethod
    def _create_pynput(cls) -> CaptureSources:
        try:
            from inputlog.event_source.pynput_adapter import (
                PynputKeyboardSource,
                PynputMouseSource,
            )
        except ImportError as exc:
            raise HookRegistrationError(f"pynput backend unavailable: {exc}") from exc

        window, resolver = cls._create_window_sources()
        return CaptureSources(
            keyboard=PynputKeyboardSource(),
            mouse=PynputMouseSource(),
            window=window,
            window_resolver=resolver,
        )

    @classmethod
    def _create_window_sources(
        cls,
    ) -> tuple[BaseEventSource | None, BaseWindowInfoResolver | None]:
        if sys.platform != "win32":
            Log.warning(f"Foreground window tracking is not supported on {sys.platform}, skipping")
            return None, None
        from inputlog.event_source.win32_adapter import (
            Win32ForegroundSource,
            Win32WindowInfoResolver,
        )

        return Win32ForegroundSource(), Win32WindowInfoResolver()
