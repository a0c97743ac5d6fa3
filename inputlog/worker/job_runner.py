from enum import Enum

from inputlog.logging.logger import Log
from inputlog.processor.processor import Processor
from inputlog.storage.exceptions import ClaimConflictError
from inputlog.storage.models import Category


class JobOutcome(str, Enum):
    DONE = "done"
    SKIPPED = "skipped"
    FAILED = "failed"


class JobRunner:
    """Run one pending file through the processor and classify the result."""

    def __init__(self, processor: Processor) -> None:
        self._processor = processor

    def run(self, category: Category, pending_name: str) -> JobOutcome:
        """Execute a single file with error handling; nothing propagates."""
        try:
            self._processor.process(category, pending_name)
        except ClaimConflictError as exc:
            Log.info(f"Skipping {pending_name}, claimed elsewhere: {exc}")
            return JobOutcome.SKIPPED
        except Exception as exc:
            Log.error(f"{pending_name} failed: {exc}")
            return JobOutcome.FAILED
        Log.info(f"{pending_name} completed successfully")
        return JobOutcome.DONE
