from collections.abc import Callable
from datetime import date
from unittest.mock import patch

import pytest

from inputlog.config.settings import Settings
from inputlog.embedding.example_adapter import ExampleEmbeddingService
from inputlog.embedding.exceptions import EmbeddingNetworkError
from inputlog.processor.processor import build_processor
from inputlog.storage.file_store import FileStore
from inputlog.storage.models import Category
from inputlog.storage.repositories.input_log_repository import InputLogRepository
from inputlog.worker.job_runner import JobRunner
from inputlog.worker.worker import ProcessWorker


class FlakyEmbeddingService(ExampleEmbeddingService):
    """Fails the first call, then behaves like the example service."""

    def __init__(self) -> None:
        super().__init__(dimensions=8)
        self.attempts = 0

    def embed_batch(self, texts: list[str]) -> list[list[float]]:
        self.attempts += 1
        if self.attempts == 1:
            raise EmbeddingNetworkError("Embedding provider network error: connection reset")
        return super().embed_batch(texts)


def _make_worker(
    settings: Settings, store: FileStore, service: ExampleEmbeddingService
) -> ProcessWorker:
    return ProcessWorker(
        InputLogRepository(store),
        JobRunner(build_processor(settings, store, service)),
        settings,
    )


@pytest.mark.integration
class TestRetryAfterFailure:
    def test_failed_file_stays_claimed_until_released(
        self,
        settings: Settings,
        store: FileStore,
        seed_keyboard_day: Callable[..., date],
    ) -> None:
        seed_keyboard_day(["One.", "Two.", "Three."])
        service = FlakyEmbeddingService()
        log_repo = InputLogRepository(store)

        first = _make_worker(settings, store, service).run()

        assert len(first.failed) == 1
        assert len(log_repo.list_in_progress(Category.KEYBOARD)) == 1
        assert log_repo.list_pending(Category.KEYBOARD) == []

        # Without a staleness threshold nothing picks the file up again.
        assert _make_worker(settings, store, service).run().done == []

        settings.stale_claim_seconds = 0
        retry = _make_worker(settings, store, service).run()

        assert len(retry.done) == 1
        assert log_repo.list_in_progress(Category.KEYBOARD) == []
        [output] = store.list_files("embeddings/*/*.jsonl")
        assert len(store.read_all(output).splitlines()) == 3

    def test_crash_after_persist_overwrites_instead_of_duplicating(
        self,
        settings: Settings,
        store: FileStore,
        embedding_service: ExampleEmbeddingService,
        seed_keyboard_day: Callable[..., date],
    ) -> None:
        seed_keyboard_day(["One.", "Two.", "Three."])

        with patch.object(InputLogRepository, "complete", side_effect=OSError("disk gone")):
            crashed = _make_worker(settings, store, embedding_service).run()
        assert len(crashed.failed) == 1
        [output] = store.list_files("embeddings/*/*.jsonl")
        assert len(store.read_all(output).splitlines()) == 3

        settings.stale_claim_seconds = 0
        retry = _make_worker(settings, store, embedding_service).run()

        assert len(retry.done) == 1
        assert store.list_files("embeddings/*/*.jsonl") == [output]
        assert len(store.read_all(output).splitlines()) == 3
        assert len(store.list_files("logs/completed/*.jsonl")) == 1
