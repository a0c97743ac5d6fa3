import argparse
import signal
import sys
from collections.abc import Callable
from datetime import date, datetime, timedelta

from inputlog.aggregation.aggregator import build_aggregator, day_start, previous_day_window
from inputlog.aggregation.archiver import build_archiver
from inputlog.config.settings import Settings
from inputlog.logging.logger import Log
from inputlog.processor.processor import build_processor
from inputlog.storage.file_store import FileStore
from inputlog.storage.repositories.input_log_repository import InputLogRepository
from inputlog.worker.capture import build_capture_service
from inputlog.worker.job_runner import JobRunner
from inputlog.worker.resources import ResourceGuard
from inputlog.worker.scheduler import ScheduledTrigger
from inputlog.worker.worker import ProcessWorker


def _parse_day(value: str) -> date:
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"expected YYYY-MM-DD, got '{value}'") from exc


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="inputlog",
        description="Capture input activity, embed it, and aggregate it on a schedule.",
    )
    subparsers = parser.add_subparsers(dest="role", required=True)
    subparsers.add_parser("capture", help="Record keyboard, mouse and window events until stopped")
    subparsers.add_parser("process", help="Embed pending log files from earlier days")
    trigger_parser = subparsers.add_parser(
        "scheduled-trigger", help="Launch process and aggregate once a day"
    )
    trigger_parser.add_argument(
        "--once",
        action="store_true",
        help="Launch the scheduled roles immediately and exit",
    )
    aggregate_parser = subparsers.add_parser(
        "aggregate", help="Summarize embeddings over a window (default: yesterday)"
    )
    aggregate_parser.add_argument("--start", type=_parse_day, help="First day, YYYY-MM-DD")
    aggregate_parser.add_argument("--end", type=_parse_day, help="Day after the last, YYYY-MM-DD")
    return parser.parse_args(argv)


def _on_sigterm(request_stop: Callable[[], None]) -> None:
    def handle_signal(signum: int, frame: object) -> None:
        _ = frame
        Log.info(f"Signal {signum} received, stopping")
        request_stop()

    signal.signal(signal.SIGTERM, handle_signal)


def run_capture(settings: Settings, args: argparse.Namespace) -> int:
    _ = args
    service = build_capture_service(settings, FileStore(settings.storage_dir))
    _on_sigterm(service.request_stop)
    service.run()
    return 0


def run_process(settings: Settings, args: argparse.Namespace) -> int:
    _ = args
    store = FileStore(settings.storage_dir)
    guard = None
    if settings.max_cpu_percent is not None:
        guard = ResourceGuard(settings.max_cpu_percent)
    worker = ProcessWorker(
        log_repo=InputLogRepository(store),
        job_runner=JobRunner(build_processor(settings, store)),
        settings=settings,
        resource_guard=guard,
    )
    report = worker.run()
    return 0 if report.ok else 1


def run_scheduled_trigger(settings: Settings, args: argparse.Namespace) -> int:
    trigger = ScheduledTrigger(settings)
    if args.once:
        return trigger.run_once()
    _on_sigterm(trigger.request_stop)
    trigger.run()
    return 0


def run_aggregate(settings: Settings, args: argparse.Namespace) -> int:
    start, end = previous_day_window()
    if args.start is not None:
        start = day_start(args.start)
    if args.end is not None:
        end = day_start(args.end)
    store = FileStore(settings.storage_dir)
    archiver = build_archiver(settings, store)
    build_aggregator(store, archiver).aggregate(start, end)
    if settings.archive_completed_days:
        # Yesterday and today stay in place for late processing and re-aggregation.
        cutoff = min(start.date(), date.today() - timedelta(days=1))
        bundles = archiver.archive_before(cutoff)
        Log.info(f"Archived {len(bundles)} day(s) to the upload queue")
    return 0


ROLES: dict[str, Callable[[Settings, argparse.Namespace], int]] = {
    "capture": run_capture,
    "process": run_process,
    "scheduled-trigger": run_scheduled_trigger,
    "aggregate": run_aggregate,
}


def main(argv: list[str] | None = None) -> int:
    """Entry point: parse role -> load settings -> run exactly one role -> exit status."""
    args = parse_args(argv)
    settings = Settings()
    Log.configure(settings.log_level, settings.log_dir)
    Log.info(f"Starting {args.role} role ({settings.app_env})")
    try:
        return ROLES[args.role](settings, args)
    except Exception as exc:
        Log.error(f"{args.role} role failed: {exc}")
        return 1


def cli() -> None:
    sys.exit(main())


if __name__ == "__main__":
    cli()
