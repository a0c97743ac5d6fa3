from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date

from inputlog.config.settings import Settings
from inputlog.logging.logger import Log
from inputlog.storage.models import Category
from inputlog.storage.repositories.input_log_repository import InputLogRepository
from inputlog.worker.job_runner import JobOutcome, JobRunner
from inputlog.worker.resources import ResourceGuard


@dataclass
class ProcessReport:
    done: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    deferred: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed


class ProcessWorker:
    """One pass over the pending queue: release stale -> list -> claim -> dispatch."""

    def __init__(
        self,
        log_repo: InputLogRepository,
        job_runner: JobRunner,
        settings: Settings,
        resource_guard: ResourceGuard | None = None,
        today: Callable[[], date] = date.today,
    ) -> None:
        self._log_repo = log_repo
        self._job_runner = job_runner
        self._settings = settings
        self._resource_guard = resource_guard
        self._today = today

    def run(self) -> ProcessReport:
        report = ProcessReport()
        before = None if self._settings.process_current_day else self._today()
        for category_name in self._settings.process_categories:
            category = Category(category_name)
            self._release_stale(category)
            for pending_name in self._log_repo.list_pending(category, before=before):
                if report.deferred or self._is_busy():
                    report.deferred.append(pending_name)
                    continue
                outcome = self._job_runner.run(category, pending_name)
                if outcome is JobOutcome.DONE:
                    report.done.append(pending_name)
                elif outcome is JobOutcome.SKIPPED:
                    report.skipped.append(pending_name)
                else:
                    report.failed.append(pending_name)
        Log.info(
            f"Processing finished: {len(report.done)} done, {len(report.skipped)} skipped, "
            f"{len(report.failed)} failed, {len(report.deferred)} deferred"
        )
        return report

    def _release_stale(self, category: Category) -> None:
        if self._settings.stale_claim_seconds is None:
            return
        released = self._log_repo.release_stale(category, self._settings.stale_claim_seconds)
        if released:
            Log.info(f"Returned {len(released)} stale {category.value} files to pending")

    def _is_busy(self) -> bool:
        return self._resource_guard is not None and self._resource_guard.is_busy()
