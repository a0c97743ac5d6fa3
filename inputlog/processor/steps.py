import uuid

from inputlog.embedding.base import BaseEmbeddingService
from inputlog.embedding.exceptions import EmbeddingError
from inputlog.logging.logger import Log
from inputlog.obfuscation.base import BaseObfuscator
from inputlog.processor.exceptions import InvalidLogFileError
from inputlog.processor.pipeline import PipelineContext, PipelineStep
from inputlog.storage.models import Category, EmbeddingRecord, InputType
from inputlog.storage.repositories.embedding_repository import EmbeddingRepository
from inputlog.storage.repositories.input_log_repository import InputLogRepository, file_date


class ClaimStep(PipelineStep):
    def __init__(self, log_repo: InputLogRepository) -> None:
        self._log_repo = log_repo

    def run(self, context: PipelineContext) -> PipelineContext:
        day = file_date(context.pending_name)
        if day is None:
            raise InvalidLogFileError(f"Cannot read a date from {context.pending_name}")
        context.day = day
        context.claimed_name = self._log_repo.claim(context.pending_name)
        return context


class LoadRecordsStep(PipelineStep):
    """Read the claimed file and decode keyboard text.

    Blank records and special-key records (shortcuts, navigation keys) are
    not embedded.
    """

    def __init__(self, log_repo: InputLogRepository, obfuscator: BaseObfuscator) -> None:
        self._log_repo = log_repo
        self._obfuscator = obfuscator

    def run(self, context: PipelineContext) -> PipelineContext:
        context.records = self._log_repo.read(context.claimed_name)
        for record in context.records:
            if record.input_type is InputType.SPECIAL:
                continue
            text = record.content
            if record.category == Category.KEYBOARD:
                text = self._obfuscator.decode(text) or ""
            if not text.strip():
                continue
            context.sources.append(record)
            context.texts.append(text)
        skipped = len(context.records) - len(context.texts)
        Log.info(
            f"Loaded {len(context.texts)} records from {context.claimed_name}"
            + (f" ({skipped} blank or special skipped)" if skipped else "")
        )
        return context


class EmbedStep(PipelineStep):
    """Embed texts in chunks, keeping each vector matched to its record by position."""

    def __init__(self, embedding_service: BaseEmbeddingService, batch_size: int) -> None:
        if batch_size <= 0:
            raise ValueError("batch_size must be positive")
        self._embedding_service = embedding_service
        self._batch_size = batch_size

    def run(self, context: PipelineContext) -> PipelineContext:
        for offset in range(0, len(context.texts), self._batch_size):
            chunk = context.texts[offset : offset + self._batch_size]
            if len(chunk) == 1:
                vectors = [self._embedding_service.embed(chunk[0])]
            else:
                vectors = self._embedding_service.embed_batch(chunk)
            if len(vectors) != len(chunk):
                raise EmbeddingError(
                    f"Expected {len(chunk)} vectors, got {len(vectors)} for {context.claimed_name}"
                )
            context.vectors.extend(vectors)
        Log.info(
            f"Embedded {len(context.vectors)} records from {context.claimed_name} "
            f"with {self._embedding_service.model_name}"
        )
        return context


class PersistEmbeddingsStep(PipelineStep):
    def __init__(
        self,
        embedding_repo: EmbeddingRepository,
        embedding_service: BaseEmbeddingService,
    ) -> None:
        self._embedding_repo = embedding_repo
        self._embedding_service = embedding_service

    def run(self, context: PipelineContext) -> PipelineContext:
        if context.day is None:
            raise ValueError("PipelineContext.day must be set before persisting embeddings")
        context.embeddings = [
            EmbeddingRecord(
                id=str(uuid.uuid4()),
                source_log_id=source.id,
                vector=vector,
                model_name=self._embedding_service.model_name,
                category=source.category,
                timestamp=source.timestamp,
                source_text=text,
            )
            for source, text, vector in zip(context.sources, context.texts, context.vectors)
        ]
        if not context.embeddings:
            Log.info(f"No embeddings to persist for {context.claimed_name}")
            return context
        context.output_name = self._embedding_repo.save_batch(
            context.claimed_name, context.day, context.embeddings
        )
        Log.info(f"Persisted {len(context.embeddings)} embeddings to {context.output_name}")
        return context


class CompleteStep(PipelineStep):
    def __init__(self, log_repo: InputLogRepository) -> None:
        self._log_repo = log_repo

    def run(self, context: PipelineContext) -> PipelineContext:
        context.completed_name = self._log_repo.complete(context.claimed_name)
        return context


class ReportFailureStep(PipelineStep):
    """Report a failed file; a claimed file stays in progress for inspection or retry."""

    def run(self, context: PipelineContext) -> PipelineContext:
        if context.claimed_name:
            Log.error(
                f"Processing {context.claimed_name} failed, left in progress: "
                f"{context.error_message}"
            )
        else:
            Log.error(f"Processing {context.pending_name} failed: {context.error_message}")
        return context
