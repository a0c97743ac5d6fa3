from dataclasses import replace
from datetime import date, datetime
from pathlib import PurePosixPath

from inputlog.obfuscation.base import BaseObfuscator
from inputlog.storage.file_store import FileStore
from inputlog.storage.models import Category, EmbeddingRecord
from inputlog.storage.serialization import parse_embedding_records, to_json_line

EMBEDDINGS_DIR = "embeddings"


class EmbeddingRepository:
    """Embedding records grouped by day and by the source log file they came from.

    Keyboard source text is kept obfuscated at rest and decoded on read.
    """

    def __init__(self, store: FileStore, obfuscator: BaseObfuscator) -> None:
        self._store = store
        self._obfuscator = obfuscator

    def output_name(self, source_name: str, day: date) -> str:
        return f"{EMBEDDINGS_DIR}/{day:%Y-%m-%d}/{PurePosixPath(source_name).name}"

    def save_batch(self, source_name: str, day: date, records: list[EmbeddingRecord]) -> str:
        """Write all records derived from one source file, replacing earlier output.

        Raises:
            TransientIOError: if the write fails.
        """
        name = self.output_name(source_name, day)
        content = "".join(to_json_line(self._encode(record)) for record in records)
        self._store.overwrite(name, content)
        return name

    def read_range(self, start: datetime, end: datetime) -> list[EmbeddingRecord]:
        """Return records with start <= timestamp < end, decoded."""
        records: list[EmbeddingRecord] = []
        for name in sorted(self._store.list_files(f"{EMBEDDINGS_DIR}/*/*.jsonl")):
            day = self._day_of(name)
            if day is None or day < start.date() or day > end.date():
                continue
            for record in parse_embedding_records(self._store.read_all(name), source=name):
                if start <= record.timestamp < end:
                    records.append(self._decode(record))
        return records

    @staticmethod
    def _day_of(name: str) -> date | None:
        try:
            return datetime.strptime(PurePosixPath(name).parent.name, "%Y-%m-%d").date()
        except ValueError:
            return None

    def _encode(self, record: EmbeddingRecord) -> EmbeddingRecord:
        if record.category != Category.KEYBOARD:
            return record
        return replace(record, source_text=self._obfuscator.encode(record.source_text) or "")

    def _decode(self, record: EmbeddingRecord) -> EmbeddingRecord:
        if record.category != Category.KEYBOARD:
            return record
        return replace(record, source_text=self._obfuscator.decode(record.source_text) or "")
