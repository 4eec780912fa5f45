import itertools
import threading
import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any

from invoice_scan.logging.logger import Log


class BaseTaskLauncher(ABC):
    """Starts background work that outlives the request that triggered it."""

    @abstractmethod
    def launch(self, fn: Callable[..., None], *args: Any) -> None:
        """Schedule ``fn(*args)`` and return without waiting for it."""

    def shutdown(self, timeout: float | None = None) -> None:
        """Wait for outstanding work, up to ``timeout`` seconds."""


class ThreadTaskLauncher(BaseTaskLauncher):
    """One daemon thread per task. No queue and no concurrency limit."""

    def __init__(self, name_prefix: str = "extraction") -> None:
        self._name_prefix = name_prefix
        self._counter = itertools.count(1)
        self._lock = threading.Lock()
        self._threads: set[threading.Thread] = set()

    @property
    def active_count(self) -> int:
        with self._lock:
            return len(self._threads)

    def launch(self, fn: Callable[..., None], *args: Any) -> None:
        thread = threading.Thread(
            target=self._run,
            args=(fn, args),
            name=f"{self._name_prefix}-{next(self._counter)}",
            daemon=True,
        )
        with self._lock:
            self._threads.add(thread)
        try:
            thread.start()
        except RuntimeError:
            with self._lock:
                self._threads.discard(thread)
            raise

    def shutdown(self, timeout: float | None = None) -> None:
        with self._lock:
            pending = list(self._threads)
        if not pending:
            return

        Log.info(f"Waiting for {len(pending)} background task(s) to finish")
        deadline = None if timeout is None else time.monotonic() + timeout
        for thread in pending:
            remaining = None if deadline is None else max(0.0, deadline - time.monotonic())
            thread.join(remaining)

        still_running = self.active_count
        if still_running:
            Log.warning(f"{still_running} background task(s) still running at shutdown")

    def _run(self, fn: Callable[..., None], args: tuple[Any, ...]) -> None:
        try:
            fn(*args)
        except Exception as exc:
            Log.exception(f"Background task {threading.current_thread().name} crashed: {exc}")
        finally:
            with self._lock:
                self._threads.discard(threading.current_thread())
