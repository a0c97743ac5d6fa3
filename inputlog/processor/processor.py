from inputlog.config.settings import Settings
from inputlog.embedding.base import BaseEmbeddingService
from inputlog.embedding.factory import EmbeddingServiceFactory
from inputlog.logging.logger import Log
from inputlog.obfuscation.rot13 import Rot13Obfuscator
from inputlog.processor.pipeline import PipelineContext, PipelineStep
from inputlog.processor.steps import (
    ClaimStep,
    CompleteStep,
    EmbedStep,
    LoadRecordsStep,
    PersistEmbeddingsStep,
    ReportFailureStep,
)
from inputlog.storage.exceptions import ClaimConflictError
from inputlog.storage.file_store import FileStore
from inputlog.storage.models import Category
from inputlog.storage.repositories.embedding_repository import EmbeddingRepository
from inputlog.storage.repositories.input_log_repository import InputLogRepository


class Processor:
    """Runs one pending log file through the embedding pipeline.

    Pipeline: claim -> load -> embed -> persist -> complete.
    A claim conflict propagates untouched; any other step failure runs the
    failed step and is re-raised.
    """

    def __init__(
        self,
        steps: list[PipelineStep],
        failed_step: PipelineStep | None = None,
    ) -> None:
        self._steps = steps
        self._failed_step = failed_step

    def process(self, category: Category, pending_name: str) -> PipelineContext:
        Log.info(f"Processing {pending_name}")
        context = PipelineContext(category=category, pending_name=pending_name)
        for step in self._steps:
            try:
                context = step.run(context)
            except ClaimConflictError:
                raise
            except Exception as exc:
                context.error_message = str(exc)
                if self._failed_step is not None:
                    self._failed_step.run(context)
                raise
        return context


def build_processor(
    settings: Settings,
    store: FileStore,
    embedding_service: BaseEmbeddingService | None = None,
) -> Processor:
    """Build a Processor with all required adapters."""
    obfuscator = Rot13Obfuscator()
    log_repo = InputLogRepository(store)
    embedding_repo = EmbeddingRepository(store, obfuscator)
    service = embedding_service or EmbeddingServiceFactory.create(settings)
    return Processor(
        steps=[
            ClaimStep(log_repo),
            LoadRecordsStep(log_repo, obfuscator),
            EmbedStep(service, settings.embedding_batch_size),
            PersistEmbeddingsStep(embedding_repo, service),
            CompleteStep(log_repo),
        ],
        failed_step=ReportFailureStep(),
    )
