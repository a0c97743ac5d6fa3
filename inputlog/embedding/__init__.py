from inputlog.embedding.base import BaseEmbeddingService
from inputlog.embedding.factory import EmbeddingServiceFactory

__all__ = ["BaseEmbeddingService", "EmbeddingServiceFactory"]
