class EmbeddingError(Exception):
    """Raised when embedding generation fails."""


class EmbeddingNetworkError(EmbeddingError):
    """Raised when the embedding provider call fails due to network/infrastructure issues."""
