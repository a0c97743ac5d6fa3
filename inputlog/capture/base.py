from abc import ABC, abstractmethod


class BaseTracker(ABC):
    """Contract for a capture engine bound to one event source."""

    name: str = "tracker"

    @abstractmethod
    def start(self) -> None:
        """Subscribe to the event source.

        Raises:
            HookRegistrationError: if the source cannot be registered.
        """

    @abstractmethod
    def stop(self) -> None:
        """Flush buffered state, then release the subscription.

        Safe to call when start() never succeeded, and more than once.
        """
