from pathlib import Path

import pytest

from inputlog.config.settings import Settings
from inputlog.storage.file_store import FileStore


@pytest.fixture()
def storage_dir(tmp_path: Path) -> Path:
    return tmp_path / "data"


@pytest.fixture()
def store(storage_dir: Path) -> FileStore:
    return FileStore(storage_dir)


@pytest.fixture()
def settings(storage_dir: Path) -> Settings:
    return Settings(
        storage_dir=storage_dir,
        event_source="manual",
        embedding_provider="example",
        embedding_dimensions=8,
        embedding_batch_size=2,
    )
