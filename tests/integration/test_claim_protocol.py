import threading
from collections.abc import Callable
from datetime import date, timedelta

import pytest

from inputlog.aggregation.aggregator import day_start
from inputlog.config.settings import Settings
from inputlog.embedding.example_adapter import ExampleEmbeddingService
from inputlog.obfuscation.rot13 import Rot13Obfuscator
from inputlog.processor.processor import build_processor
from inputlog.storage.exceptions import ClaimConflictError
from inputlog.storage.file_store import FileStore
from inputlog.storage.models import Category
from inputlog.storage.repositories.embedding_repository import EmbeddingRepository
from inputlog.storage.repositories.input_log_repository import InputLogRepository
from inputlog.worker.job_runner import JobRunner
from inputlog.worker.worker import ProcessReport, ProcessWorker


@pytest.mark.integration
class TestConcurrentClaims:
    def test_exactly_one_claim_wins(
        self, store: FileStore, seed_keyboard_day: Callable[..., date]
    ) -> None:
        seed_keyboard_day(["hi."])
        repo = InputLogRepository(store)
        pending = repo.list_pending(Category.KEYBOARD)[0]
        barrier = threading.Barrier(2)
        results: list[str] = []

        def attempt() -> None:
            barrier.wait()
            try:
                repo.claim(pending)
                results.append("claimed")
            except ClaimConflictError:
                results.append("conflict")

        threads = [threading.Thread(target=attempt) for _ in range(2)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert sorted(results) == ["claimed", "conflict"]

    def test_overlapping_runs_embed_each_record_once(
        self,
        settings: Settings,
        store: FileStore,
        seed_keyboard_day: Callable[..., date],
        make_embedding_service: Callable[[], ExampleEmbeddingService],
    ) -> None:
        yesterday = date.today() - timedelta(days=1)
        for offset in range(4):
            seed_keyboard_day(
                [f"day {offset} one.", f"day {offset} two."],
                yesterday - timedelta(days=offset),
            )
        services = [make_embedding_service(), make_embedding_service()]
        barrier = threading.Barrier(2)
        reports: list[ProcessReport] = []

        def run(service: ExampleEmbeddingService) -> None:
            worker = ProcessWorker(
                InputLogRepository(store),
                JobRunner(build_processor(settings, store, service)),
                settings,
            )
            barrier.wait()
            reports.append(worker.run())

        threads = [threading.Thread(target=run, args=(service,)) for service in services]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        embedded = [text for service in services for text in service.embedded_texts]  # type: ignore[attr-defined]
        assert sorted(embedded) == sorted(
            f"day {offset} {which}." for offset in range(4) for which in ("one", "two")
        )
        assert all(report.ok for report in reports)
        assert sum(len(report.done) for report in reports) == 4
        assert len(store.list_files("logs/completed/*.jsonl")) == 4


@pytest.mark.integration
class TestSameDayPasses:
    def test_second_pass_of_the_day_keeps_the_first_passes_embeddings(
        self,
        settings: Settings,
        store: FileStore,
        seed_keyboard_day: Callable[..., date],
        embedding_service: ExampleEmbeddingService,
    ) -> None:
        settings.process_current_day = True
        today = date.today()

        def run_pass() -> ProcessReport:
            return ProcessWorker(
                InputLogRepository(store),
                JobRunner(build_processor(settings, store, embedding_service)),
                settings,
            ).run()

        seed_keyboard_day(["hello."], today)
        first = run_pass()
        seed_keyboard_day(["again."], today)
        second = run_pass()

        assert first.ok and second.ok
        assert len(store.list_files("logs/completed/*.jsonl")) == 2
        records = EmbeddingRepository(store, Rot13Obfuscator()).read_range(
            day_start(today), day_start(today + timedelta(days=1))
        )
        assert sorted(record.source_text for record in records) == ["again.", "hello."]
