import psutil

from inputlog.logging.logger import Log

UNKNOWN_PROCESS = "N/A"


def process_name_for(pid: int) -> str:
    """Return the executable name of a process, or a placeholder if it cannot be read."""
    if pid <= 0:
        return UNKNOWN_PROCESS
    try:
        return psutil.Process(pid).name()
    except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess) as exc:
        Log.warning(f"Could not resolve process name for PID {pid}: {exc}")
        return UNKNOWN_PROCESS
