import threading
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor, wait
from types import TracebackType

from inputlog.logging.logger import Log


class AsyncWriter:
    """Runs store writes off the caller's thread and tracks them until drained.

    A single worker thread keeps writes in submission order. Every exit path
    should end in drain(); use the writer as a context manager to get that.
    """

    def __init__(self, name: str = "writer") -> None:
        self._name = name
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix=f"inputlog-{name}")
        self._pending: set[Future[None]] = set()
        self._lock = threading.Lock()
        self._closed = False

    @property
    def pending_count(self) -> int:
        with self._lock:
            return len(self._pending)

    def submit(self, fn: Callable[..., None], *args: object) -> Future[None]:
        """Queue a write. Failures are logged when the write completes."""
        with self._lock:
            if self._closed:
                raise RuntimeError(f"AsyncWriter '{self._name}' is already drained")
            future = self._executor.submit(fn, *args)
            self._pending.add(future)
        future.add_done_callback(self._on_done)
        return future

    def drain(self, timeout: float | None = None) -> int:
        """Wait for outstanding writes, then stop accepting new ones.

        Writes still outstanding after timeout are cancelled or left to finish
        unobserved; each is logged as abandoned. Returns the abandoned count.
        """
        with self._lock:
            self._closed = True
            outstanding = set(self._pending)
        if outstanding:
            Log.info(f"Draining {len(outstanding)} pending writes ({self._name})")
        _done, not_done = wait(outstanding, timeout=timeout)
        for future in not_done:
            future.cancel()
            Log.error(f"Abandoned pending write ({self._name}) after {timeout}s drain timeout")
        self._executor.shutdown(wait=not not_done, cancel_futures=True)
        return len(not_done)

    def __enter__(self) -> "AsyncWriter":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.drain()

    def _on_done(self, future: Future[None]) -> None:
        with self._lock:
            self._pending.discard(future)
        if future.cancelled():
            return
        exc = future.exception()
        if exc is not None:
            Log.error(f"Write failed ({self._name}), abandoned: {exc}")
