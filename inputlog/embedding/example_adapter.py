"""Example embedding adapter.

Use this module as a reference when implementing new provider adapters.
Implement BaseEmbeddingService and register the provider in EmbeddingServiceFactory.
"""

import hashlib
import math
import random

from inputlog.embedding.base import BaseEmbeddingService


class ExampleEmbeddingService(BaseEmbeddingService):
    """Example adapter that derives unit vectors from a hash of the text.

    No network calls. The same text always yields the same vector, across
    processes too, which makes it useful for local development and tests.
    """

    def __init__(self, dimensions: int = 384, model_name: str = "example") -> None:
        if dimensions <= 0:
            raise ValueError("dimensions must be positive")
        self._dimensions = dimensions
        self._model_name = model_name

    @property
    def model_name(self) -> str:
        return self._model_name

    @property
    def dimensions(self) -> int:
        return self._dimensions

    def embed_batch(self, texts: list[str]) -> list[list[float]]:
        return [self._vector_for(text) for text in texts]

    def _vector_for(self, text: str) -> list[float]:
        seed = int.from_bytes(hashlib.sha256(text.encode("utf-8")).digest()[:8], "big")
        rng = random.Random(seed)
        values = [rng.gauss(0.0, 1.0) for _ in range(self._dimensions)]
        norm = math.sqrt(sum(value * value for value in values)) or 1.0
        return [value / norm for value in values]
