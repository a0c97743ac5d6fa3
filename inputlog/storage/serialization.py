import json
from dataclasses import asdict
from datetime import datetime
from enum import Enum

from inputlog.logging.logger import Log
from inputlog.storage.models import Category, EmbeddingRecord, InputLog, InputType, WindowLog


def _default(value: object) -> object:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def to_json_line(record: InputLog | WindowLog | EmbeddingRecord) -> str:
    """Serialize a record dataclass as one JSON Lines entry, newline included."""
    return json.dumps(asdict(record), default=_default, ensure_ascii=False) + "\n"


def _iter_objects(content: str, source: str) -> list[dict[str, object]]:
    objects: list[dict[str, object]] = []
    for number, line in enumerate(content.splitlines(), start=1):
        if not line.strip():
            continue
        try:
            parsed = json.loads(line)
        except json.JSONDecodeError:
            Log.warning(f"Skipping malformed line {number} in {source}")
            continue
        if not isinstance(parsed, dict):
            Log.warning(f"Skipping non-object line {number} in {source}")
            continue
        objects.append(parsed)
    return objects


def parse_input_logs(content: str, source: str = "<memory>") -> list[InputLog]:
    logs: list[InputLog] = []
    for obj in _iter_objects(content, source):
        try:
            logs.append(
                InputLog(
                    id=str(obj["id"]),
                    timestamp=datetime.fromisoformat(str(obj["timestamp"])),
                    content=str(obj["content"]),
                    category=Category(obj["category"]),
                    input_type=InputType(obj.get("input_type", InputType.TEXT.value)),
                )
            )
        except (KeyError, ValueError) as exc:
            Log.warning(f"Skipping invalid input log in {source}: {exc}")
    return logs


def parse_window_logs(content: str, source: str = "<memory>") -> list[WindowLog]:
    logs: list[WindowLog] = []
    for obj in _iter_objects(content, source):
        try:
            logs.append(
                WindowLog(
                    id=str(obj["id"]),
                    timestamp=datetime.fromisoformat(str(obj["timestamp"])),
                    window_handle=int(obj["window_handle"]),  # type: ignore[call-overload]
                    window_title=str(obj.get("window_title", "")),
                    process_name=str(obj.get("process_name", "")),
                )
            )
        except (KeyError, ValueError, TypeError) as exc:
            Log.warning(f"Skipping invalid window log in {source}: {exc}")
    return logs


def parse_embedding_records(content: str, source: str = "<memory>") -> list[EmbeddingRecord]:
    records: list[EmbeddingRecord] = []
    for obj in _iter_objects(content, source):
        try:
            vector = obj["vector"]
            if not isinstance(vector, list):
                raise ValueError("vector must be a list")
            records.append(
                EmbeddingRecord(
                    id=str(obj["id"]),
                    source_log_id=str(obj["source_log_id"]),
                    vector=[float(v) for v in vector],
                    model_name=str(obj["model_name"]),
                    category=Category(obj["category"]),
                    timestamp=datetime.fromisoformat(str(obj["timestamp"])),
                    source_text=str(obj.get("source_text", "")),
                )
            )
        except (KeyError, ValueError, TypeError) as exc:
            Log.warning(f"Skipping invalid embedding record in {source}: {exc}")
    return records
