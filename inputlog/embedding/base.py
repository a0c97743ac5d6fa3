from abc import ABC, abstractmethod


class BaseEmbeddingService(ABC):
    """Contract for provider-specific text embedding services."""

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Name recorded on every vector this service produces."""

    @abstractmethod
    def embed_batch(self, texts: list[str]) -> list[list[float]]:
        """Return one vector per text, in input order.

        Raises:
            EmbeddingError: if the provider fails; the whole call fails.
        """

    def embed(self, text: str) -> list[float]:
        return self.embed_batch([text])[0]
