from dataclasses import dataclass


@dataclass(frozen=True)
class WindowInfo:
    """Best-effort metadata of a foreground window."""

    title: str = ""
    process_name: str = ""


@dataclass(frozen=True)
class SpecialKey:
    """A non-text key or shortcut, named like ``enter``, ``arrow_left`` or ``ctrl+shift+t``."""

    name: str
