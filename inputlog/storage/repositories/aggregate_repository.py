import json
from dataclasses import asdict
from datetime import datetime

from inputlog.storage.file_store import FileStore
from inputlog.storage.models import AggregateArtifact

AGGREGATES_DIR = "aggregates"


def aggregate_file_name(start: datetime, end: datetime) -> str:
    return f"{AGGREGATES_DIR}/aggregate-{start:%Y%m%dT%H%M%S}-{end:%Y%m%dT%H%M%S}.json"


class AggregateRepository:
    """One JSON artifact per aggregation window, overwritten on re-run."""

    def __init__(self, store: FileStore) -> None:
        self._store = store

    def save(self, artifact: AggregateArtifact) -> str:
        name = aggregate_file_name(artifact.period_start, artifact.period_end)
        payload = asdict(artifact)
        payload["period_start"] = artifact.period_start.isoformat()
        payload["period_end"] = artifact.period_end.isoformat()
        self._store.overwrite(name, json.dumps(payload, sort_keys=True, indent=2) + "\n")
        return name

    def load(self, start: datetime, end: datetime) -> dict[str, object] | None:
        content = self._store.read_all(aggregate_file_name(start, end))
        if not content:
            return None
        loaded: dict[str, object] = json.loads(content)
        return loaded
