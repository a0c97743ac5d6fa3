from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class Category(str, Enum):
    """Capture category of an input record."""

    KEYBOARD = "keyboard"
    MOUSE = "mouse"
    WINDOW = "window"


class InputType(str, Enum):
    """Kind of keyboard record: typed text, or a special key or shortcut such as ``ctrl+c``."""

    TEXT = "text"
    SPECIAL = "special"


@dataclass(frozen=True)
class InputLog:
    """One flushed keyboard sentence, special key, or mouse click-rate sample."""

    id: str
    timestamp: datetime
    content: str
    category: Category
    input_type: InputType = InputType.TEXT


@dataclass(frozen=True)
class WindowLog:
    """One foreground-window transition."""

    id: str
    timestamp: datetime
    window_handle: int
    window_title: str = ""
    process_name: str = ""


@dataclass(frozen=True)
class EmbeddingRecord:
    """Vector produced from exactly one consumed InputLog."""

    id: str
    source_log_id: str
    vector: list[float]
    model_name: str
    category: Category
    timestamp: datetime
    source_text: str = ""


@dataclass
class AggregateArtifact:
    """Summary of embedding records over one [period_start, period_end) window."""

    period_start: datetime
    period_end: datetime
    counts: dict[str, int] = field(default_factory=dict)
    statistics: dict[str, object] = field(default_factory=dict)
