from typing import ClassVar

from inputlog.config.settings import Settings
from inputlog.embedding.base import BaseEmbeddingService
from inputlog.embedding.example_adapter import ExampleEmbeddingService
from inputlog.embedding.openai_adapter import OpenAIEmbeddingService


class EmbeddingServiceFactory:
    """Creates the configured embedding service adapter."""

    OPENAI_COMPATIBLE_BASE_URLS: ClassVar[dict[str, str]] = {
        "together": "https://api.together.xyz/v1",
        "ollama": "http://localhost:11434/v1",
    }

    @classmethod
    def create(cls, settings: Settings) -> BaseEmbeddingService:
        """Create a configured embedding service from application settings."""
        provider = settings.embedding_provider.lower()
        if provider == "example":
            return ExampleEmbeddingService(dimensions=settings.embedding_dimensions)
        return OpenAIEmbeddingService(
            api_key=cls._resolve_api_key(provider, settings),
            model=settings.embedding_model_name,
            timeout_seconds=settings.embedding_timeout_seconds,
            base_url=cls._resolve_base_url(provider, settings),
        )

    @classmethod
    def _resolve_base_url(cls, provider: str, settings: Settings) -> str | None:
        if provider == "openai":
            return None
        if provider == "openai_compatible":
            url = (settings.embedding_openai_compatible_base_url or "").strip()
            if not url:
                raise ValueError(
                    "embedding_openai_compatible_base_url is required for "
                    "embedding_provider=openai_compatible"
                )
            return url
        default_base_url = cls.OPENAI_COMPATIBLE_BASE_URLS.get(provider)
        if default_base_url is not None:
            return default_base_url
        supported = [
            "example",
            "openai",
            "openai_compatible",
            *sorted(cls.OPENAI_COMPATIBLE_BASE_URLS),
        ]
        raise ValueError(f"Unknown embedding provider '{provider}'. Choose from: {supported}")

    @classmethod
    def _resolve_api_key(cls, provider: str, settings: Settings) -> str:
        # Local servers such as ollama accept any non-empty key.
        if provider == "ollama" and not settings.embedding_openai_api_key:
            return "ollama"
        return settings.embedding_openai_api_key
