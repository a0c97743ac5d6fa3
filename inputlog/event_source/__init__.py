from inputlog.event_source.base import BaseEventSource, BaseWindowInfoResolver
from inputlog.event_source.factory import CaptureSources, EventSourceFactory
from inputlog.event_source.manual_adapter import ManualEventSource, ManualWindowInfoResolver
from inputlog.event_source.models import SpecialKey, WindowInfo

__all__ = [
    "BaseEventSource",
    "BaseWindowInfoResolver",
    "CaptureSources",
    "EventSourceFactory",
    "ManualEventSource",
    "ManualWindowInfoResolver",
    "SpecialKey",
    "WindowInfo",
]
