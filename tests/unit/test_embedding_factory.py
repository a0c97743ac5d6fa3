from unittest.mock import MagicMock, patch

import pytest

from inputlog.config.settings import Settings
from inputlog.embedding.example_adapter import ExampleEmbeddingService
from inputlog.embedding.factory import EmbeddingServiceFactory
from inputlog.embedding.openai_adapter import OpenAIEmbeddingService


class TestEmbeddingServiceFactory:
    def test_creates_example_service(self) -> None:
        service = EmbeddingServiceFactory.create(
            Settings(embedding_provider="example", embedding_dimensions=12)
        )
        assert isinstance(service, ExampleEmbeddingService)
        assert service.dimensions == 12

    def test_creates_openai_service(self) -> None:
        settings = Settings(
            embedding_provider="openai",
            embedding_openai_api_key="sk-test",
            embedding_model_name="text-embedding-3-small",
        )
        with patch("inputlog.embedding.openai_adapter.openai.OpenAI") as mock_openai:
            service = EmbeddingServiceFactory.create(settings)
        assert isinstance(service, OpenAIEmbeddingService)
        assert service.model_name == "text-embedding-3-small"
        mock_openai.assert_called_once_with(api_key="sk-test", timeout=30, base_url=None)

    @pytest.mark.parametrize(
        ("provider", "base_url"),
        [
            ("ollama", "http://localhost:11434/v1"),
            ("together", "https://api.together.xyz/v1"),
        ],
    )
    def test_known_providers_use_default_base_url(self, provider: str, base_url: str) -> None:
        settings = Settings(embedding_provider=provider, embedding_openai_api_key="k")
        with patch("inputlog.embedding.openai_adapter.openai.OpenAI") as mock_openai:
            EmbeddingServiceFactory.create(settings)
        assert mock_openai.call_args.kwargs["base_url"] == base_url

    def test_ollama_gets_placeholder_key(self) -> None:
        settings = Settings(embedding_provider="ollama")
        with patch("inputlog.embedding.openai_adapter.openai.OpenAI") as mock_openai:
            EmbeddingServiceFactory.create(settings)
        assert mock_openai.call_args.kwargs["api_key"] == "ollama"

    def test_openai_compatible_requires_base_url(self) -> None:
        settings = Settings(embedding_provider="openai_compatible")
        with pytest.raises(ValueError, match="embedding_openai_compatible_base_url"):
            EmbeddingServiceFactory.create(settings)

    def test_openai_compatible_uses_configured_url(self) -> None:
        settings = Settings(
            embedding_provider="openai_compatible",
            embedding_openai_compatible_base_url=" http://embed.local/v1 ",
        )
        with patch(
            "inputlog.embedding.openai_adapter.openai.OpenAI", return_value=MagicMock()
        ) as mock_openai:
            EmbeddingServiceFactory.create(settings)
        assert mock_openai.call_args.kwargs["base_url"] == "http://embed.local/v1"

    def test_unknown_provider_raises(self) -> None:
        with pytest.raises(ValueError, match="Unknown embedding provider"):
            EmbeddingServiceFactory.create(Settings(embedding_provider="nope"))
