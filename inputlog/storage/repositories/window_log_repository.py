from concurrent.futures import Future
from datetime import date

from inputlog.storage.async_writer import AsyncWriter
from inputlog.storage.file_store import FileStore
from inputlog.storage.models import WindowLog
from inputlog.storage.serialization import parse_window_logs, to_json_line

WINDOWS_DIR = "windows"


def window_log_file_name(day: date) -> str:
    return f"{WINDOWS_DIR}/window_logs-{day:%Y-%m-%d}.jsonl"


class WindowLogRepository:
    """Append-only daily files of foreground-window transitions."""

    def __init__(self, store: FileStore, writer: AsyncWriter | None = None) -> None:
        self._store = store
        self._writer = writer

    def save(self, log: WindowLog) -> Future[None] | None:
        name = window_log_file_name(log.timestamp.date())
        line = to_json_line(log)
        if self._writer is not None:
            return self._writer.submit(self._store.append, name, line)
        self._store.append(name, line)
        return None

    def read_day(self, day: date) -> list[WindowLog]:
        name = window_log_file_name(day)
        return parse_window_logs(self._store.read_all(name), source=name)
