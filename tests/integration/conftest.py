import uuid
from collections.abc import Callable
from datetime import date, datetime, timedelta, timezone

import pytest

from inputlog.embedding.example_adapter import ExampleEmbeddingService
from inputlog.obfuscation.rot13 import Rot13Obfuscator
from inputlog.storage.file_store import FileStore
from inputlog.storage.models import Category, InputLog
from inputlog.storage.repositories.input_log_repository import InputLogRepository


class RecordingEmbeddingService(ExampleEmbeddingService):
    """Example service that remembers every text it was asked to embed."""

    def __init__(self, dimensions: int = 8) -> None:
        super().__init__(dimensions=dimensions)
        self.calls: list[list[str]] = []

    def embed_batch(self, texts: list[str]) -> list[list[float]]:
        self.calls.append(list(texts))
        return super().embed_batch(texts)

    @property
    def embedded_texts(self) -> list[str]:
        return [text for call in self.calls for text in call]


@pytest.fixture()
def make_embedding_service() -> Callable[[], RecordingEmbeddingService]:
    return RecordingEmbeddingService


@pytest.fixture()
def embedding_service() -> RecordingEmbeddingService:
    return RecordingEmbeddingService()


@pytest.fixture()
def seed_keyboard_day(store: FileStore) -> Callable[..., date]:
    """Write plain sentences as one day's obfuscated keyboard log (default: yesterday)."""

    def seed(sentences: list[str], day: date | None = None) -> date:
        day = day or date.today() - timedelta(days=1)
        repo = InputLogRepository(store)
        obfuscator = Rot13Obfuscator()
        tz = datetime.now().astimezone().tzinfo or timezone.utc
        for index, sentence in enumerate(sentences):
            repo.save(
                InputLog(
                    id=f"{day:%Y%m%d}-{index}-{uuid.uuid4().hex[:8]}",
                    timestamp=datetime(day.year, day.month, day.day, 9, index, tzinfo=tz),
                    content=obfuscator.encode(sentence) or "",
                    category=Category.KEYBOARD,
                )
            )
        return day

    return seed
