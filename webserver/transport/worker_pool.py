"""Fixed-size worker pool draining a bounded task queue."""

import logging
import queue
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from webserver.domain.correlation_id import CorrelationLoggerAdapter

POOL_LOGGER = CorrelationLoggerAdapter(
    logging.getLogger("webserver.transport.pool"), {}
)

POLL_INTERVAL_SECONDS = 0.1


class PoolClosed(RuntimeError):
    """Raised when work is submitted after shutdown began."""


@dataclass
class _Task:
    func: Callable[..., Any]
    args: tuple = ()
    on_abort: Optional[Callable[[], Any]] = None
    on_discard: Optional[Callable[[], Any]] = None
    submitted_at: float = field(default_factory=time.monotonic)

    def abort(self, started: bool) -> None:
        """Run ``on_abort`` for a started task, ``on_discard`` for one that never ran."""
        callback = self.on_abort
        if not started and self.on_discard is not None:
            callback = self.on_discard
        if callback is None:
            return
        try:
            callback()
        except Exception as error:  # pylint: disable=broad-except
            POOL_LOGGER.warning(
                "Abort callback failed",
                extra={"event": "abort_failed", "error_type": type(error).__name__},
            )


class WorkerPool:
    """Runs submitted callables on at most ``size`` long-lived threads.

    Work beyond ``size`` waits in a queue of at most ``queue_size`` entries
    (0 means unbounded); ``submit`` blocks while that queue is full. A task
    that raises is logged and never takes its worker thread down.

    ``shutdown`` stops intake, lets queued and running tasks finish within
    the grace period, then calls ``on_abort`` for every task still running,
    ``on_discard`` (falling back to ``on_abort``) for every task that never
    started, and abandons the (daemon) threads.
    """

    def __init__(self, size: int, queue_size: int = 0, name: str = "worker") -> None:
        self._size = max(1, size)
        self._tasks: queue.Queue[_Task] = queue.Queue(maxsize=max(0, queue_size))
        self._closed = threading.Event()
        self._lock = threading.Lock()
        self._active: dict[int, _Task] = {}
        self._aborting = False
        self._threads = [
            threading.Thread(target=self._run, name=f"{name}-{index}", daemon=True)
            for index in range(self._size)
        ]
        self._started = False

    @property
    def size(self) -> int:
        return self._size

    def start(self) -> None:
        with self._lock:
            if self._started:
                return
            self._started = True
        for thread in self._threads:
            thread.start()

    def submit(
        self,
        func: Callable[..., Any],
        *args: Any,
        on_abort: Optional[Callable[[], Any]] = None,
        on_discard: Optional[Callable[[], Any]] = None,
    ) -> None:
        """Queue ``func(*args)``, waiting while the queue is full."""
        task = _Task(func, args, on_abort, on_discard)
        while True:
            if self._closed.is_set():
                raise PoolClosed("Worker pool is shut down")
            try:
                self._tasks.put(task, timeout=POLL_INTERVAL_SECONDS)
                return
            except queue.Full:
                continue

    def active_count(self) -> int:
        with self._lock:
            return len(self._active)

    def pending_count(self) -> int:
        return self._tasks.qsize()

    def _run(self) -> None:
        ident = threading.get_ident()
        while True:
            try:
                task = self._tasks.get(timeout=POLL_INTERVAL_SECONDS)
            except queue.Empty:
                if self._closed.is_set():
                    return
                continue
            with self._lock:
                discarded = self._aborting
                if not discarded:
                    self._active[ident] = task
            if discarded:
                task.abort(started=False)
                self._tasks.task_done()
                continue
            try:
                task.func(*task.args)
            except Exception as error:  # pylint: disable=broad-except
                POOL_LOGGER.error(
                    "Task raised in worker",
                    extra={
                        "event": "task_error",
                        "error_type": type(error).__name__,
                    },
                    exc_info=True,
                )
            finally:
                with self._lock:
                    self._active.pop(ident, None)
                self._tasks.task_done()

    def shutdown(self, grace_seconds: float) -> bool:
        """Drain within ``grace_seconds``; returns False if work had to be aborted."""
        self._closed.set()
        deadline = time.monotonic() + max(0.0, grace_seconds)
        if self._started:
            for thread in self._threads:
                thread.join(timeout=max(0.0, deadline - time.monotonic()))

        with self._lock:
            running = list(self._active.values())
            queued = []
            while True:
                try:
                    queued.append(self._tasks.get_nowait())
                except queue.Empty:
                    break
            if running or queued:
                self._aborting = True

        if not running and not queued:
            POOL_LOGGER.info("Worker pool drained", extra={"event": "pool_drained"})
            return True

        POOL_LOGGER.warning(
            "Shutdown grace period exceeded, aborting remaining work",
            extra={
                "event": "pool_forced_shutdown",
                "active_workers": len(running),
                "pending_connections": len(queued),
            },
        )
        for task in running:
            task.abort(started=True)
        for task in queued:
            task.abort(started=False)
        return False
