import psutil

from inputlog.logging.logger import Log


class ResourceGuard:
    """Reports whether the machine is too busy to take on more processing."""

    def __init__(self, max_cpu_percent: float, sample_seconds: float = 1.0) -> None:
        self._max_cpu_percent = max_cpu_percent
        self._sample_seconds = sample_seconds

    def is_busy(self) -> bool:
        usage = psutil.cpu_percent(interval=self._sample_seconds)
        if usage > self._max_cpu_percent:
            Log.warning(f"CPU at {usage:.1f}% exceeds {self._max_cpu_percent:.1f}%")
            return True
        return False
