import os
from datetime import datetime
from pathlib import Path

from inputlog.logging.logger import Log
from inputlog.storage.exceptions import (
    AlreadyExistsError,
    DirectoryCreationError,
    NotFoundError,
    TransientIOError,
)


class FileStore:
    """Flat files under one base directory, shared by every role via the filesystem.

    Names are paths relative to the base directory, e.g.
    ``logs/pending/keyboard_logs-2026-10-17.jsonl``.
    """

    def __init__(self, base_dir: Path) -> None:
        self._base_dir = base_dir.resolve()
        self.ensure_directory("")
        Log.info(f"Storing logs in: {self._base_dir}")

    @property
    def base_dir(self) -> Path:
        return self._base_dir

    def path_for(self, name: str) -> Path:
        return self._base_dir / name

    def append(self, name: str, content: str) -> None:
        """Append text to a file, creating it and its parent directory.

        If the file does not end in a newline, the text starts on a new line.

        Raises:
            TransientIOError: if the write fails. Nothing is retried.
        """
        self._write(name, content, mode="a")

    def overwrite(self, name: str, content: str) -> None:
        """Replace the content of a file.

        Raises:
            TransientIOError: if the write fails. Nothing is retried.
        """
        self._write(name, content, mode="w")

    def read_all(self, name: str) -> str:
        """Return the file content, or an empty string when absent or unreadable."""
        path = self.path_for(name)
        if not path.exists():
            return ""
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            Log.error(f"Error reading from {path}: {exc}")
            return ""

    def list_files(self, pattern: str) -> list[str]:
        """Return relative names of files matching a glob pattern."""
        return [
            path.relative_to(self._base_dir).as_posix()
            for path in self._base_dir.glob(pattern)
            if path.is_file()
        ]

    def list_directories(self, pattern: str) -> list[str]:
        """Return relative names of directories matching a glob pattern."""
        return [
            path.relative_to(self._base_dir).as_posix()
            for path in self._base_dir.glob(pattern)
            if path.is_dir()
        ]

    def move(self, old_name: str, new_name: str) -> None:
        """Move a file within the store, never replacing an existing destination.

        The destination is created with a hard link, which fails atomically
        when the name is taken, and the source name is unlinked afterwards.
        Of two concurrent moves of one source exactly one succeeds.

        Raises:
            NotFoundError: if old_name does not exist (or vanished mid-move).
            AlreadyExistsError: if new_name is already present.
        """
        old_path = self.path_for(old_name)
        new_path = self.path_for(new_name)
        if not old_path.is_file():
            raise NotFoundError(f"File not found: {old_name}")
        self.ensure_directory(Path(new_name).parent.as_posix())
        try:
            os.link(old_path, new_path)
        except FileNotFoundError as exc:
            raise NotFoundError(f"File not found: {old_name}") from exc
        except FileExistsError as exc:
            raise AlreadyExistsError(f"File already exists: {new_name}") from exc
        try:
            os.unlink(old_path)
        except FileNotFoundError as exc:
            # Another mover unlinked the source first; the file is theirs.
            new_path.unlink(missing_ok=True)
            raise NotFoundError(f"File not found: {old_name}") from exc
        Log.debug(f"Moved '{old_name}' to '{new_name}'")

    def move_directory(self, old_name: str, new_name: str) -> None:
        """Rename a whole directory within the store.

        Raises:
            NotFoundError: if old_name is not a directory.
            AlreadyExistsError: if new_name is already present.
        """
        old_path = self.path_for(old_name)
        new_path = self.path_for(new_name)
        if not old_path.is_dir():
            raise NotFoundError(f"Directory not found: {old_name}")
        if new_path.exists():
            raise AlreadyExistsError(f"Directory already exists: {new_name}")
        self.ensure_directory(Path(new_name).parent.as_posix())
        os.rename(old_path, new_path)
        Log.debug(f"Moved directory '{old_name}' to '{new_name}'")

    def exists(self, name: str) -> bool:
        return self.path_for(name).exists()

    def delete(self, name: str) -> None:
        self.path_for(name).unlink()

    def touch(self, name: str) -> None:
        """Set the modification time of an existing file to now."""
        os.utime(self.path_for(name))

    def modified_at(self, name: str) -> datetime:
        return datetime.fromtimestamp(self.path_for(name).stat().st_mtime).astimezone()

    def ensure_directory(self, path: str) -> None:
        """Create a directory under the base directory if missing.

        Raises:
            DirectoryCreationError: if the directory cannot be created.
        """
        full_path = self._base_dir / path
        try:
            full_path.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            Log.error(f"Failed to create directory {full_path}: {exc}")
            raise DirectoryCreationError(f"Failed to ensure directory exists: {full_path}") from exc

    def _write(self, name: str, content: str, *, mode: str) -> None:
        path = self.path_for(name)
        self.ensure_directory(Path(name).parent.as_posix())
        try:
            if mode == "a" and self._ends_mid_line(path):
                # A crash left a torn last line; start the new record on its own line.
                content = "\n" + content
            with path.open(mode, encoding="utf-8") as handle:
                handle.write(content)
        except OSError as exc:
            Log.error(f"Error writing to {path}: {exc}")
            raise TransientIOError(f"Error writing to {name}: {exc}") from exc

    @staticmethod
    def _ends_mid_line(path: Path) -> bool:
        if not path.exists():
            return False
        with path.open("rb") as handle:
            handle.seek(0, os.SEEK_END)
            if handle.tell() == 0:
                return False
            handle.seek(-1, os.SEEK_END)
            return handle.read(1) != b"\n"
