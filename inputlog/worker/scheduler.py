import subprocess
import sys
import threading
from collections.abc import Callable
from datetime import datetime, timedelta

from inputlog.config.settings import Settings
from inputlog.logging.logger import Log

SCHEDULED_ROLES = ("process", "aggregate")


def launch_role(role: str) -> int:
    """Run one role in a fresh interpreter and return its exit code."""
    command = [sys.executable, "-m", "inputlog.main", role]
    Log.info(f"Launching {role} role")
    completed = subprocess.run(command, check=False)
    return completed.returncode


class ScheduledTrigger:
    """Daily loop: sleep until schedule_time -> launch process -> launch aggregate.

    Each role runs as its own process, so nothing but the store is shared.
    """

    def __init__(
        self,
        settings: Settings,
        launcher: Callable[[str], int] = launch_role,
        clock: Callable[[], datetime] | None = None,
        sleep: Callable[[float], object] | None = None,
    ) -> None:
        self._settings = settings
        self._launcher = launcher
        self._clock = clock or (lambda: datetime.now().astimezone())
        self._stop_event = threading.Event()
        self._sleep = sleep or self._stop_event.wait

    def next_run_after(self, now: datetime) -> datetime:
        hours, _, minutes = self._settings.schedule_time.partition(":")
        candidate = now.replace(hour=int(hours), minute=int(minutes), second=0, microsecond=0)
        if candidate <= now:
            candidate += timedelta(days=1)
        return candidate

    def run_once(self) -> int:
        """Launch every scheduled role in order. Returns 0 only if all succeeded."""
        status = 0
        for role in SCHEDULED_ROLES:
            code = self._launcher(role)
            if code != 0:
                Log.error(f"{role} role exited with status {code}")
                status = 1
        return status

    def request_stop(self) -> None:
        self._stop_event.set()

    def run(self, max_runs: int | None = None) -> None:
        """Main loop. Runs until stopped or interrupted.

        If max_runs is set, stop after that many scheduled runs (for testing).
        """
        next_run = self.next_run_after(self._clock())
        Log.info(f"Scheduled trigger started, next run at {next_run.isoformat()}")
        runs = 0
        try:
            while not self._stop_event.is_set():
                if max_runs is not None and runs >= max_runs:
                    break
                now = self._clock()
                if now >= next_run:
                    self.run_once()
                    runs += 1
                    next_run = self.next_run_after(now)
                    Log.info(f"Next run at {next_run.isoformat()}")
                    continue
                remaining = (next_run - now).total_seconds()
                self._sleep(min(self._settings.schedule_poll_interval_seconds, remaining))
        except KeyboardInterrupt:
            Log.info("Scheduled trigger shutting down gracefully")
