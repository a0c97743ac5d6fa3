from unittest.mock import MagicMock

from inputlog.embedding.exceptions import EmbeddingError
from inputlog.storage.exceptions import ClaimConflictError
from inputlog.storage.models import Category
from inputlog.worker.job_runner import JobOutcome, JobRunner

_PENDING = "logs/pending/keyboard_logs-2026-10-16.jsonl"


def _make_runner() -> tuple[JobRunner, MagicMock]:
    """Create a JobRunner with a mocked processor."""
    mock_processor = MagicMock()
    return JobRunner(mock_processor), mock_processor


class TestSuccessfulProcessing:
    def test_calls_processor(self) -> None:
        runner, mock_processor = _make_runner()

        runner.run(Category.KEYBOARD, _PENDING)

        mock_processor.process.assert_called_once_with(Category.KEYBOARD, _PENDING)

    def test_reports_done(self) -> None:
        runner, _processor = _make_runner()
        assert runner.run(Category.KEYBOARD, _PENDING) is JobOutcome.DONE


class TestClaimConflict:
    def test_reports_skipped(self) -> None:
        runner, mock_processor = _make_runner()
        mock_processor.process.side_effect = ClaimConflictError("taken")

        assert runner.run(Category.KEYBOARD, _PENDING) is JobOutcome.SKIPPED


class TestFailure:
    def test_embedding_failure_reports_failed(self) -> None:
        runner, mock_processor = _make_runner()
        mock_processor.process.side_effect = EmbeddingError("down")

        assert runner.run(Category.KEYBOARD, _PENDING) is JobOutcome.FAILED

    def test_unexpected_error_does_not_propagate(self) -> None:
        runner, mock_processor = _make_runner()
        mock_processor.process.side_effect = RuntimeError("boom")

        assert runner.run(Category.KEYBOARD, _PENDING) is JobOutcome.FAILED
