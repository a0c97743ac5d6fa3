import getpass
import socket
from datetime import date, datetime
from pathlib import PurePosixPath

from inputlog.config.settings import KeyboardRetention, Settings
from inputlog.logging.logger import Log
from inputlog.storage.exceptions import AlreadyExistsError
from inputlog.storage.file_store import FileStore
from inputlog.storage.models import Category
from inputlog.storage.repositories.embedding_repository import EMBEDDINGS_DIR
from inputlog.storage.repositories.input_log_repository import (
    COMPLETED_DIR,
    IN_PROGRESS_DIR,
    PENDING_DIR,
    InputLogRepository,
    file_date,
)
from inputlog.storage.repositories.window_log_repository import WINDOWS_DIR, window_log_file_name

UPLOAD_QUEUE_DIR = "upload-queue"
DELETED_DIR = "logs/deleted"


def _current_user() -> str:
    try:
        return getpass.getuser()
    except (KeyError, OSError):
        return "unknown"


class Archiver:
    """Moves finished days out of the working directories into upload bundles.

    A day is finished once no queued category has a pending or in-progress
    file for it. Its bundle ``upload-queue/<host>-<user>-<YYYY-MM-DD>/`` gets:

      - ``window_logs.jsonl``: the day's window transitions
      - ``mouse_logs.jsonl``: the day's click-rate samples
      - ``embeddings/``: every embedding file of the day

    Raw keyboard logs never enter a bundle. They are deleted, or moved to
    ``logs/deleted/`` when retention is "keep". Archiving a day twice merges
    the late files into the existing bundle.
    """

    def __init__(
        self,
        store: FileStore,
        log_repo: InputLogRepository,
        queued_categories: list[Category],
        keyboard_retention: KeyboardRetention = "delete",
        host: str | None = None,
        user: str | None = None,
    ) -> None:
        self._store = store
        self._log_repo = log_repo
        self._queued = list(queued_categories)
        self._keyboard_retention = keyboard_retention
        self._host = host or socket.gethostname()
        self._user = user or _current_user()

    def bundle_name(self, day: date) -> str:
        return f"{UPLOAD_QUEUE_DIR}/{self._host}-{self._user}-{day:%Y-%m-%d}"

    def is_archived(self, day: date) -> bool:
        return self._store.exists(self.bundle_name(day))

    def days_with_data(self) -> list[date]:
        """Every day that still has logs, window transitions or embeddings in the working directories."""
        names = self._store.list_files("logs/*/*_logs-*.jsonl")
        names += self._store.list_files(f"{WINDOWS_DIR}/window_logs-*.jsonl")
        days = {file_date(name) for name in names if not name.startswith(f"{DELETED_DIR}/")}
        for directory in self._store.list_directories(f"{EMBEDDINGS_DIR}/*"):
            try:
                days.add(datetime.strptime(PurePosixPath(directory).name, "%Y-%m-%d").date())
            except ValueError:
                continue
        return sorted(day for day in days if day is not None)

    def is_finished(self, day: date) -> bool:
        return not any(
            self._log_repo.list_state(directory, category, day)
            for category in self._queued
            for directory in (PENDING_DIR, IN_PROGRESS_DIR)
        )

    def archive_before(self, cutoff: date) -> list[str]:
        """Archive every finished day strictly before cutoff. Returns the bundle names."""
        bundles: list[str] = []
        for day in self.days_with_data():
            if day >= cutoff:
                break
            if not self.is_finished(day):
                Log.info(f"Not archiving {day}: log files still queued for embedding")
                continue
            bundles.append(self.archive_day(day))
        return bundles

    def archive_day(self, day: date) -> str:
        bundle = self.bundle_name(day)
        self._store.ensure_directory(bundle)

        window_log = window_log_file_name(day)
        if self._store.exists(window_log):
            self._merge_into(window_log, f"{bundle}/window_logs.jsonl")

        for name in self._raw_files(Category.MOUSE, day):
            self._merge_into(name, f"{bundle}/mouse_logs.jsonl")

        self._move_embeddings(f"{EMBEDDINGS_DIR}/{day:%Y-%m-%d}", f"{bundle}/embeddings")

        for name in self._raw_files(Category.KEYBOARD, day):
            if self._keyboard_retention == "keep":
                self._merge_into(name, f"{DELETED_DIR}/{PurePosixPath(name).name}")
            else:
                self._store.delete(name)
                Log.info(f"Deleted keyboard log {name}")

        Log.info(f"Archived {day} into {bundle}")
        return bundle

    def _raw_files(self, category: Category, day: date) -> list[str]:
        """Completed files of a queued category, pending files of one that is never embedded."""
        directory = COMPLETED_DIR if category in self._queued else PENDING_DIR
        return self._log_repo.list_state(directory, category, day)

    def _move_embeddings(self, directory: str, target: str) -> None:
        if not self._store.path_for(directory).is_dir():
            return
        if not self._store.exists(target):
            self._store.move_directory(directory, target)
            return
        for name in sorted(self._store.list_files(f"{directory}/*.jsonl")):
            self._merge_into(name, f"{target}/{PurePosixPath(name).name}")
        path = self._store.path_for(directory)
        if not any(path.iterdir()):
            path.rmdir()

    def _merge_into(self, name: str, target: str) -> None:
        try:
            self._store.move(name, target)
            return
        except AlreadyExistsError:
            pass
        # Unreadable sources raise here, before anything is deleted.
        content = self._store.path_for(name).read_text(encoding="utf-8")
        if content:
            self._store.append(target, content)
        self._store.delete(name)
        Log.debug(f"Merged '{name}' into '{target}'")


def build_archiver(settings: Settings, store: FileStore) -> Archiver:
    """Build an Archiver for the categories the process role embeds."""
    return Archiver(
        store=store,
        log_repo=InputLogRepository(store),
        queued_categories=[Category(name) for name in settings.process_categories],
        keyboard_retention=settings.keyboard_log_retention,
    )
