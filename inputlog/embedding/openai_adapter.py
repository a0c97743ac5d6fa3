import httpx
import openai

from inputlog.embedding.base import BaseEmbeddingService
from inputlog.embedding.exceptions import EmbeddingError, EmbeddingNetworkError


class OpenAIEmbeddingService(BaseEmbeddingService):
    """Embedding service built on the OpenAI-compatible embeddings API."""

    def __init__(
        self,
        *,
        api_key: str,
        model: str,
        timeout_seconds: int,
        base_url: str | None = None,
    ) -> None:
        self._model = model
        self._client = openai.OpenAI(
            api_key=api_key,
            timeout=timeout_seconds,
            base_url=base_url,
        )

    @property
    def model_name(self) -> str:
        return self._model

    def embed_batch(self, texts: list[str]) -> list[list[float]]:
        if not texts:
            return []
        try:
            response = self._client.embeddings.create(model=self._model, input=texts)
        except (openai.APIConnectionError, httpx.ConnectError, httpx.TimeoutException) as exc:
            raise EmbeddingNetworkError(
                f"Embedding provider network error: {exc}"
            ) from exc
        except openai.APIError as exc:
            raise EmbeddingNetworkError(
                f"Embedding provider API error: {exc}"
            ) from exc

        items = sorted(response.data, key=lambda item: item.index)
        if len(items) != len(texts):
            raise EmbeddingError(
                f"Embedding provider returned {len(items)} vectors for {len(texts)} inputs"
            )
        return [list(item.embedding) for item in items]
