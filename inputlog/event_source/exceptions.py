class EventSourceError(Exception):
    """Base exception for all event source errors."""


class HookRegistrationError(EventSourceError):
    """Raised when an OS hook cannot be registered. Fatal at capture startup."""


class UnsupportedPlatformError(EventSourceError):
    """Raised when an adapter is created on an OS it does not support."""
