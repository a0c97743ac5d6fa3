from abc import ABC, abstractmethod
from collections.abc import Callable

from inputlog.event_source.models import WindowInfo


class BaseEventSource(ABC):
    """Contract for a stream of raw OS notifications of one kind.

    A source delivers events serially from a single callback thread. Keyboard
    sources call handler(char) for typed text and handler(SpecialKey) for
    shortcuts and navigation keys, mouse sources handler(), and foreground
    sources handler(window_handle).
    """

    @abstractmethod
    def start(self, handler: Callable[..., None]) -> None:
        """Register the OS hook and begin delivering events to handler.

        Raises:
            HookRegistrationError: if the hook cannot be registered.
        """

    @abstractmethod
    def stop(self) -> None:
        """Release the hook. A no-op if start() never succeeded."""


class BaseWindowInfoResolver(ABC):
    """Contract for resolving window metadata from a handle."""

    @abstractmethod
    def resolve(self, window_handle: int) -> WindowInfo:
        """Return title and owning-process name, with empty/placeholder values on failure."""
