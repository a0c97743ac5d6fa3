from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date

from inputlog.storage.models import Category, EmbeddingRecord, InputLog


@dataclass(slots=True)
class PipelineContext:
    category: Category
    pending_name: str
    claimed_name: str = ""
    completed_name: str = ""
    day: date | None = None
    records: list[InputLog] = field(default_factory=list)
    sources: list[InputLog] = field(default_factory=list)
    texts: list[str] = field(default_factory=list)
    vectors: list[list[float]] = field(default_factory=list)
    embeddings: list[EmbeddingRecord] = field(default_factory=list)
    output_name: str = ""
    error_message: str = ""


class PipelineStep(ABC):
    @abstractmethod
    def run(self, context: PipelineContext) -> PipelineContext:
        raise NotImplementedError
