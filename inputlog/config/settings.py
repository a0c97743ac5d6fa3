from pathlib import Path
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

KeyboardRetention = Literal["delete", "keep"]


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"
    log_dir: Path | None = None

    storage_dir: Path = Path("data")

    event_source: str = "pynput"
    mouse_interval_seconds: int = 60
    shutdown_drain_timeout_seconds: float = 10.0

    process_categories: list[str] = ["keyboard"]
    process_current_day: bool = False
    stale_claim_seconds: int | None = None
    max_cpu_percent: float | None = None

    embedding_provider: str = "example"
    embedding_batch_size: int = 10
    embedding_dimensions: int = 384
    embedding_model_name: str = "multilingual-e5-small"
    embedding_openai_api_key: str = ""
    embedding_openai_compatible_base_url: str | None = None
    embedding_timeout_seconds: int = 30

    schedule_time: str = "00:00"
    schedule_poll_interval_seconds: int = 60

    archive_completed_days: bool = True
    keyboard_log_retention: KeyboardRetention = "delete"

    @field_validator("mouse_interval_seconds", "embedding_batch_size", "embedding_dimensions")
    @classmethod
    def _must_be_positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("must be a positive integer")
        return value

    @field_validator("schedule_time")
    @classmethod
    def _must_be_clock_time(cls, value: str) -> str:
        hours, sep, minutes = value.partition(":")
        if not sep or not hours.isdigit() or not minutes.isdigit():
            raise ValueError("schedule_time must be HH:MM")
        if not (0 <= int(hours) < 24 and 0 <= int(minutes) < 60):
            raise ValueError("schedule_time must be HH:MM")
        return value

    @field_validator("process_categories")
    @classmethod
    def _must_be_queued_categories(cls, value: list[str]) -> list[str]:
        allowed = {"keyboard", "mouse"}
        normalized = [item.strip().lower() for item in value]
        unknown = sorted(set(normalized) - allowed)
        if unknown:
            raise ValueError(f"unknown categories {unknown}; choose from {sorted(allowed)}")
        return normalized
