"""Background execution of blocking svn operations.

An ``OperationScheduler`` runs callables on a thread pool and hands back an
``AsyncOperation`` handle the caller can poll, wait on, or attach callbacks
to. Two delivery modes exist:

- ``"worker"``: callbacks run on the worker thread as soon as the
  operation finishes.
- ``"poll"``: callbacks are queued and run only from ``scheduler.poll()``,
  so a single-threaded host (a UI loop) sees them on its own thread.

Caveats every consumer must know:

- Abandoning a handle does not kill the svn process. The operation runs to
  completion and its result is dropped; its callbacks never fire.
- ``shutdown()`` abandons everything in flight. Callbacks of those
  operations never fire, silently.
- There is no de-duplication. Two operations on the same path run
  independently and may interleave at the svn level; wait for one to finish
  before starting the next if order matters.
"""

from __future__ import annotations

import inspect
import os
import threading
from collections import deque
from concurrent.futures import CancelledError, Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Any, Callable, Deque, Generic, List, Literal, Optional, TypeVar

from svnbridge.logging_config import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

DispatchMode = Literal["worker", "poll"]
DoneCallback = Callable[["AsyncOperation[Any]"], None]


class OperationAbandoned(Exception):
    """Raised when asking for the result of an abandoned operation."""


class CancellationToken:
    """Set when the handle is abandoned. Long operations may check it between steps."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


def get_optimal_worker_count(user_specified: Optional[int] = None) -> int:
    """Worker count for I/O-bound subprocess work."""
    if user_specified is not None and user_specified > 0:
        return user_specified
    cpu_count = os.cpu_count() or 1
    return min(32, cpu_count + 4)


class AsyncOperation(Generic[T]):
    """Handle for one scheduled operation."""

    def __init__(self, future: "Future[T]", token: CancellationToken, scheduler: "OperationScheduler") -> None:
        self._future = future
        self._token = token
        self._scheduler = scheduler
        self._lock = threading.Lock()
        self._callbacks: List[DoneCallback] = []
        self._abandoned = False

    # ---- state ----

    @property
    def done(self) -> bool:
        return self._future.done()

    @property
    def abandoned(self) -> bool:
        return self._abandoned

    @property
    def token(self) -> CancellationToken:
        return self._token

    # ---- results ----

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until done or *timeout* seconds pass. Returns ``done``."""
        if self._abandoned:
            return self.done
        try:
            self._future.exception(timeout=timeout)
        except FutureTimeoutError:
            return False
        except CancelledError:
            pass
        return True

    def result(self, timeout: Optional[float] = None) -> T:
        """Return the operation result, re-raising its exception if it failed."""
        if self._abandoned:
            raise OperationAbandoned("Operation was abandoned; its result was dropped.")
        return self._future.result(timeout=timeout)

    def exception(self, timeout: Optional[float] = None) -> Optional[BaseException]:
        if self._abandoned:
            raise OperationAbandoned("Operation was abandoned; its result was dropped.")
        return self._future.exception(timeout=timeout)

    # ---- callbacks ----

    def add_done_callback(self, callback: DoneCallback) -> None:
        """Call ``callback(operation)`` once the operation finishes.

        Added after completion, the callback is delivered right away (worker
        mode) or on the next ``poll()`` (poll mode).
        """
        with self._lock:
            if self._abandoned:
                return
            self._callbacks.append(callback)
        if self.done:
            self._scheduler._deliver(self)

    def abandon(self) -> None:
        """Stop caring about this operation. The subprocess is left to finish."""
        with self._lock:
            self._abandoned = True
            self._callbacks.clear()
        self._token.cancel()
        self._future.cancel()
        self._scheduler._forget(self)

    # ---- internals ----

    def _attach(self) -> None:
        self._future.add_done_callback(self._on_future_done)

    def _on_future_done(self, _future: "Future[T]") -> None:
        if self._abandoned:
            return
        self._scheduler._deliver(self)

    def _fire(self) -> None:
        with self._lock:
            if self._abandoned:
                return
            callbacks, self._callbacks = self._callbacks, []
        for cb in callbacks:
            try:
                cb(self)
            except Exception:
                logger.exception("Completion callback of an svn operation failed")


class OperationScheduler:
    """Runs blocking operations off the caller's thread."""

    def __init__(self, max_workers: Optional[int] = None, dispatch: DispatchMode = "worker") -> None:
        if dispatch not in ("worker", "poll"):
            raise ValueError(f"Unknown dispatch mode: {dispatch!r}")
        self.dispatch = dispatch
        self._executor = ThreadPoolExecutor(
            max_workers=get_optimal_worker_count(max_workers),
            thread_name_prefix="svnbridge",
        )
        self._lock = threading.Lock()
        self._pending: Deque[AsyncOperation[Any]] = deque()
        self._in_flight: List[AsyncOperation[Any]] = []
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def start(self, fn: Callable[..., T], *args: Any, **kwargs: Any) -> AsyncOperation[T]:
        """Schedule ``fn(*args, **kwargs)``.

        If *fn* takes a ``token`` keyword it receives the operation's
        CancellationToken.
        """
        token = CancellationToken()
        if _accepts_token(fn):
            kwargs["token"] = token
        with self._lock:
            if self._closed:
                raise RuntimeError("OperationScheduler has been shut down")
            future = self._executor.submit(fn, *args, **kwargs)
            operation: AsyncOperation[T] = AsyncOperation(future, token, self)
            self._in_flight.append(operation)
        # Registered outside the lock: an already finished future calls back immediately.
        operation._attach()
        return operation

    def poll(self) -> int:
        """Run queued callbacks on the calling thread. Returns how many operations were delivered."""
        delivered = 0
        while True:
            with self._lock:
                if not self._pending:
                    break
                operation = self._pending.popleft()
            operation._fire()
            delivered += 1
        return delivered

    def shutdown(self, wait: bool = False) -> None:
        """Abandon every in-flight operation and stop the workers."""
        with self._lock:
            self._closed = True
            in_flight, self._in_flight = self._in_flight, []
            self._pending.clear()
        dropped = [op for op in in_flight if not op.done]
        for operation in in_flight:
            operation.abandon()
        if dropped:
            logger.warning("Dropped %d in-flight svn operation(s) on shutdown", len(dropped))
        self._executor.shutdown(wait=wait, cancel_futures=True)

    def _forget(self, operation: AsyncOperation[Any]) -> None:
        with self._lock:
            if operation in self._in_flight:
                self._in_flight.remove(operation)
            if operation in self._pending:
                self._pending.remove(operation)

    def _deliver(self, operation: AsyncOperation[Any]) -> None:
        with self._lock:
            if self._closed:
                return
            if operation in self._in_flight:
                self._in_flight.remove(operation)
            if self.dispatch == "poll":
                if operation not in self._pending:
                    self._pending.append(operation)
                return
        operation._fire()


def _accepts_token(fn: Callable[..., Any]) -> bool:
    try:
        return "token" in inspect.signature(fn).parameters
    except (TypeError, ValueError):
        return False


_default_scheduler: Optional[OperationScheduler] = None
_default_lock = threading.Lock()


def get_default_scheduler() -> OperationScheduler:
    """Shared worker-mode scheduler, created on first use."""
    global _default_scheduler
    with _default_lock:
        if _default_scheduler is None or _default_scheduler.closed:
            _default_scheduler = OperationScheduler()
        return _default_scheduler
