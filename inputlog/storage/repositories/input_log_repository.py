import uuid
from concurrent.futures import Future
from datetime import date, datetime
from pathlib import PurePosixPath

from inputlog.logging.logger import Log
from inputlog.storage.async_writer import AsyncWriter
from inputlog.storage.exceptions import AlreadyExistsError, ClaimConflictError, NotFoundError
from inputlog.storage.file_store import FileStore
from inputlog.storage.models import Category, InputLog
from inputlog.storage.serialization import parse_input_logs, to_json_line

PENDING_DIR = "logs/pending"
IN_PROGRESS_DIR = "logs/in_progress"
COMPLETED_DIR = "logs/completed"


def input_log_file_name(category: Category, day: date) -> str:
    """Build the per-day file name: {category}_logs-{YYYY-MM-DD}.jsonl"""
    return f"{category.value}_logs-{day:%Y-%m-%d}.jsonl"


def split_claim(name: str) -> tuple[str, str | None]:
    """Split a log file name into its daily base name and claim id.

    ``keyboard_logs-2026-10-16.jsonl`` has no claim id;
    ``keyboard_logs-2026-10-16.3f2a.jsonl`` has claim id ``3f2a``.
    """
    stem = PurePosixPath(name).name.removesuffix(".jsonl")
    base, _, claim_id = stem.partition(".")
    return base, claim_id or None


def file_date(name: str) -> date | None:
    """Extract the day from a log file name, or None if it does not follow the convention."""
    base, _claim_id = split_claim(name)
    _, sep, day = base.rpartition("_logs-")
    if not sep:
        return None
    try:
        return datetime.strptime(day, "%Y-%m-%d").date()
    except ValueError:
        return None


class InputLogRepository:
    """Pending/in-progress/completed queue of keyboard and mouse log files.

    A file moves pending -> in_progress (claim) -> completed. Each move links the
    new name without replacing anything and then unlinks the old one, so the
    move itself is the lock.
    """

    def __init__(self, store: FileStore, writer: AsyncWriter | None = None) -> None:
        self._store = store
        self._writer = writer

    def save(self, log: InputLog) -> Future[None] | None:
        """Append a log to today's pending file for its category.

        With a writer the append is queued and its future returned; without
        one the append runs inline and TransientIOError propagates.
        """
        name = f"{PENDING_DIR}/{input_log_file_name(log.category, log.timestamp.date())}"
        line = to_json_line(log)
        if self._writer is not None:
            return self._writer.submit(self._store.append, name, line)
        self._store.append(name, line)
        return None

    def list_pending(self, category: Category, before: date | None = None) -> list[str]:
        """Return pending file names for a category, oldest day first.

        When before is given, only files dated strictly earlier are returned.
        """
        names = self._store.list_files(f"{PENDING_DIR}/{category.value}_logs-*.jsonl")
        dated = [(file_date(name), name) for name in names]
        eligible = [
            (day, name)
            for day, name in dated
            if day is not None and (before is None or day < before)
        ]
        return [name for _day, name in sorted(eligible)]

    def list_in_progress(self, category: Category) -> list[str]:
        return self.list_state(IN_PROGRESS_DIR, category)

    def list_state(self, directory: str, category: Category, day: date | None = None) -> list[str]:
        """Return sorted file names of a category in one queue directory, optionally of one day."""
        names = self._store.list_files(f"{directory}/{category.value}_logs-*.jsonl")
        return sorted(name for name in names if day is None or file_date(name) == day)

    def claim(self, pending_name: str) -> str:
        """Move a pending file to in_progress and stamp the claim time.

        The claimed file is named ``<base>.<claim id>.jsonl``, so every claim
        of the same day stays a separate file through completion. A file that
        was released back to pending keeps its claim id when claimed again.

        Raises:
            ClaimConflictError: if another invocation claimed it first.
        """
        base, claim_id = split_claim(pending_name)
        claimed_name = f"{IN_PROGRESS_DIR}/{base}.{claim_id or uuid.uuid4().hex}.jsonl"
        try:
            self._store.move(pending_name, claimed_name)
        except (NotFoundError, AlreadyExistsError) as exc:
            raise ClaimConflictError(f"{pending_name} already claimed: {exc}") from exc
        self._store.touch(claimed_name)
        Log.info(f"Claimed {pending_name}")
        return claimed_name

    def complete(self, claimed_name: str) -> str:
        """Move a claimed file to completed.

        Raises:
            NotFoundError: if the claimed file is gone.
            AlreadyExistsError: if this claim was already completed.
        """
        completed_name = f"{COMPLETED_DIR}/{PurePosixPath(claimed_name).name}"
        self._store.move(claimed_name, completed_name)
        Log.info(f"Completed {claimed_name}")
        return completed_name

    def release_stale(self, category: Category, threshold_seconds: int) -> list[str]:
        """Return in-progress files claimed longer ago than threshold back to pending."""
        released: list[str] = []
        now = datetime.now().astimezone()
        for claimed_name in self.list_in_progress(category):
            try:
                age = (now - self._store.modified_at(claimed_name)).total_seconds()
            except OSError:
                continue
            if age < threshold_seconds:
                continue
            pending_name = f"{PENDING_DIR}/{PurePosixPath(claimed_name).name}"
            try:
                self._store.move(claimed_name, pending_name)
            except AlreadyExistsError:
                Log.warning(
                    f"Cannot release stale {claimed_name}: {pending_name} exists, "
                    "leaving it for inspection"
                )
                continue
            except NotFoundError:
                continue
            Log.warning(f"Released stale claim {claimed_name} ({int(age)}s old)")
            released.append(pending_name)
        return released

    def read(self, name: str) -> list[InputLog]:
        """Parse all records of a log file; content stays as persisted."""
        return parse_input_logs(self._store.read_all(name), source=name)

    def read_category(self, category: Category) -> list[InputLog]:
        """Read every record of a category across pending, in-progress and completed files."""
        logs: list[InputLog] = []
        for directory in (PENDING_DIR, IN_PROGRESS_DIR, COMPLETED_DIR):
            for name in sorted(self._store.list_files(f"{directory}/{category.value}_logs-*.jsonl")):
                logs.extend(self.read(name))
        return logs
