from collections import Counter, defaultdict
from datetime import date, datetime, time, timedelta

from inputlog.aggregation.archiver import Archiver
from inputlog.aggregation.exceptions import ArchivedDayError
from inputlog.logging.logger import Log
from inputlog.obfuscation.rot13 import Rot13Obfuscator
from inputlog.storage.file_store import FileStore
from inputlog.storage.models import AggregateArtifact, Category, EmbeddingRecord, InputLog
from inputlog.storage.repositories.aggregate_repository import AggregateRepository
from inputlog.storage.repositories.embedding_repository import EmbeddingRepository
from inputlog.storage.repositories.input_log_repository import InputLogRepository
from inputlog.storage.repositories.window_log_repository import WindowLogRepository

TOP_PROCESSES = 5
CLICK_RATE_PREFIX = "ClicksPerMinute="


def day_start(day: date) -> datetime:
    """Local midnight at the start of a day, as an aware datetime."""
    return datetime.combine(day, time.min).astimezone()


def previous_day_window(today: date | None = None) -> tuple[datetime, datetime]:
    """Return [yesterday 00:00, today 00:00) in local time."""
    today = today or date.today()
    return day_start(today - timedelta(days=1)), day_start(today)


class Aggregator:
    """Folds embedding records of one time window into a single summary artifact.

    Re-running for the same window with unchanged input rewrites a
    byte-identical artifact. A window reaching into an archived day is refused,
    since its inputs have left the working directories.
    """

    def __init__(
        self,
        embedding_repo: EmbeddingRepository,
        log_repo: InputLogRepository,
        window_repo: WindowLogRepository,
        aggregate_repo: AggregateRepository,
        archiver: Archiver | None = None,
    ) -> None:
        self._embedding_repo = embedding_repo
        self._log_repo = log_repo
        self._window_repo = window_repo
        self._aggregate_repo = aggregate_repo
        self._archiver = archiver

    def aggregate(self, start: datetime, end: datetime) -> AggregateArtifact:
        if end <= start:
            raise ValueError(f"Aggregation window is empty: {start} >= {end}")
        self._check_not_archived(start, end)
        records = self._embedding_repo.read_range(start, end)
        counts = Counter(record.category.value for record in records)
        artifact = AggregateArtifact(
            period_start=start,
            period_end=end,
            counts=dict(sorted(counts.items())),
            statistics={
                "total_records": len(records),
                "models": self._model_stats(records),
                "mean_text_length": self._mean_text_length(records),
                "centroids": self._centroids(records),
                "mouse": self._mouse_stats(start, end),
                "windows": self._window_stats(start, end),
            },
        )
        name = self._aggregate_repo.save(artifact)
        Log.info(f"Aggregated {len(records)} embeddings into {name}")
        return artifact

    def _check_not_archived(self, start: datetime, end: datetime) -> None:
        if self._archiver is None:
            return
        day = start.date()
        last = (end - timedelta(microseconds=1)).date()
        while day <= last:
            if self._archiver.is_archived(day):
                raise ArchivedDayError(
                    f"Cannot aggregate {start} - {end}: {day} was archived to "
                    f"{self._archiver.bundle_name(day)}"
                )
            day += timedelta(days=1)

    @staticmethod
    def _model_stats(records: list[EmbeddingRecord]) -> dict[str, dict[str, int]]:
        stats: dict[str, dict[str, int]] = {}
        for record in records:
            entry = stats.setdefault(
                record.model_name, {"count": 0, "dimensions": len(record.vector)}
            )
            entry["count"] += 1
            if entry["dimensions"] != len(record.vector):
                Log.warning(
                    f"Model {record.model_name} produced vectors of differing length "
                    f"({entry['dimensions']} and {len(record.vector)})"
                )
        return stats

    @staticmethod
    def _mean_text_length(records: list[EmbeddingRecord]) -> dict[str, float]:
        lengths: dict[str, list[int]] = defaultdict(list)
        for record in records:
            lengths[record.category.value].append(len(record.source_text))
        return {
            category: round(sum(values) / len(values), 2)
            for category, values in sorted(lengths.items())
        }

    @staticmethod
    def _centroids(records: list[EmbeddingRecord]) -> dict[str, dict[str, list[float]]]:
        """Mean vector per category and model; vectors of another length are left out."""
        groups: dict[tuple[str, str], list[list[float]]] = defaultdict(list)
        for record in records:
            groups[(record.category.value, record.model_name)].append(record.vector)
        centroids: dict[str, dict[str, list[float]]] = {}
        for (category, model), vectors in sorted(groups.items()):
            dimensions = len(vectors[0])
            same_length = [vector for vector in vectors if len(vector) == dimensions]
            centroid = [
                round(sum(column) / len(same_length), 6) for column in zip(*same_length)
            ]
            centroids.setdefault(category, {})[model] = centroid
        return centroids

    def _mouse_stats(self, start: datetime, end: datetime) -> dict[str, float | int]:
        rates: list[float] = []
        for log in self._log_repo.read_category(Category.MOUSE):
            if not start <= log.timestamp < end:
                continue
            rate = self._click_rate(log)
            if rate is not None:
                rates.append(rate)
        if not rates:
            return {"samples": 0}
        return {
            "samples": len(rates),
            "mean_clicks_per_minute": round(sum(rates) / len(rates), 2),
            "max_clicks_per_minute": round(max(rates), 2),
        }

    @staticmethod
    def _click_rate(log: InputLog) -> float | None:
        if not log.content.startswith(CLICK_RATE_PREFIX):
            Log.warning(f"Unexpected mouse log content in {log.id}")
            return None
        try:
            return float(log.content[len(CLICK_RATE_PREFIX) :])
        except ValueError:
            Log.warning(f"Unreadable click rate in {log.id}: {log.content}")
            return None

    def _window_stats(self, start: datetime, end: datetime) -> dict[str, object]:
        processes: Counter[str] = Counter()
        transitions = 0
        day = start.date()
        while day <= end.date():
            for log in self._window_repo.read_day(day):
                if start <= log.timestamp < end:
                    transitions += 1
                    processes[log.process_name or "N/A"] += 1
            day += timedelta(days=1)
        top = sorted(processes.items(), key=lambda item: (-item[1], item[0]))[:TOP_PROCESSES]
        return {
            "transitions": transitions,
            "top_processes": [{"process_name": name, "count": count} for name, count in top],
        }


def build_aggregator(store: FileStore, archiver: Archiver | None = None) -> Aggregator:
    """Build an Aggregator over the shared store."""
    return Aggregator(
        embedding_repo=EmbeddingRepository(store, Rot13Obfuscator()),
        log_repo=InputLogRepository(store),
        window_repo=WindowLogRepository(store),
        aggregate_repo=AggregateRepository(store),
        archiver=archiver,
    )
