import logging
import sys
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path

_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"


class Log:
    """Centralized logging with structured format."""

    _logger: logging.Logger = logging.getLogger("inputlog")

    @classmethod
    def configure(cls, log_level: str, log_dir: Path | None = None) -> None:
        """Configure the logger with the specified level and stdout handler.

        When log_dir is given, a daily rotated file handler keeping five days
        of history is attached as well.
        """
        cls._logger.setLevel(log_level.upper())
        if cls._logger.handlers:
            return
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(_FORMAT))
        cls._logger.addHandler(handler)
        if log_dir is not None:
            log_dir.mkdir(parents=True, exist_ok=True)
            file_handler = TimedRotatingFileHandler(
                log_dir / "inputlog.log",
                when="midnight",
                backupCount=5,
                encoding="utf-8",
            )
            file_handler.setFormatter(logging.Formatter(_FORMAT))
            cls._logger.addHandler(file_handler)

    @classmethod
    def info(cls, message: str, **kwargs: object) -> None:
        """Log an info message."""
        cls._logger.info(message, extra=kwargs)

    @classmethod
    def error(cls, message: str, **kwargs: object) -> None:
        """Log an error message."""
        cls._logger.error(message, extra=kwargs)

    @classmethod
    def warning(cls, message: str, **kwargs: object) -> None:
        """Log a warning message."""
        cls._logger.warning(message, extra=kwargs)

    @classmethod
    def debug(cls, message: str, **kwargs: object) -> None:
        """Log a debug message."""
        cls._logger.debug(message, extra=kwargs)
