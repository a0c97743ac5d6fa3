from abc import ABC, abstractmethod


class BaseObfuscator(ABC):
    """Contract for reversible at-rest text transforms."""

    @abstractmethod
    def encode(self, text: str | None) -> str | None:
        """Obfuscate text before it is persisted."""

    @abstractmethod
    def decode(self, text: str | None) -> str | None:
        """Restore text obfuscated by encode()."""
