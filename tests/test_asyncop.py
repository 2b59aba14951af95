"""Tests for the background operation scheduler."""

import threading
import time

import pytest

from svnbridge.asyncop import (
    CancellationToken,
    OperationAbandoned,
    OperationScheduler,
    get_default_scheduler,
    get_optimal_worker_count,
)


def _poll_until(scheduler: OperationScheduler, expected: int, timeout: float = 5.0) -> int:
    """Poll until *expected* operations were delivered; completion callbacks race the waiter."""
    delivered = 0
    deadline = time.monotonic() + timeout
    while delivered < expected and time.monotonic() < deadline:
        delivered += scheduler.poll()
        time.sleep(0.01)
    return delivered


@pytest.fixture
def worker_scheduler():
    scheduler = OperationScheduler(max_workers=2)
    yield scheduler
    scheduler.shutdown(wait=True)


@pytest.fixture
def poll_scheduler():
    scheduler = OperationScheduler(max_workers=2, dispatch="poll")
    yield scheduler
    scheduler.shutdown(wait=True)


class TestWorkerCount:
    def test_user_specified(self):
        assert get_optimal_worker_count(3) == 3

    def test_default_bounded(self):
        assert 1 <= get_optimal_worker_count() <= 32

    def test_non_positive_falls_back(self):
        assert get_optimal_worker_count(0) == get_optimal_worker_count()


class TestResults:
    def test_result(self, worker_scheduler):
        operation = worker_scheduler.start(lambda a, b: a + b, 2, 3)
        assert operation.result(timeout=5) == 5
        assert operation.done

    def test_exception_propagates(self, worker_scheduler):
        def boom():
            raise RuntimeError("svn crashed")

        operation = worker_scheduler.start(boom)
        with pytest.raises(RuntimeError, match="svn crashed"):
            operation.result(timeout=5)
        assert isinstance(operation.exception(), RuntimeError)

    def test_wait_times_out(self, worker_scheduler):
        gate = threading.Event()
        operation = worker_scheduler.start(gate.wait, 5)
        assert operation.wait(timeout=0.05) is False
        gate.set()
        assert operation.wait(timeout=5) is True

    def test_token_injected(self, worker_scheduler):
        def job(path, token):
            return path, isinstance(token, CancellationToken)

        operation = worker_scheduler.start(job, "Assets")
        assert operation.result(timeout=5) == ("Assets", True)


class TestWorkerDispatch:
    def test_callback_runs_on_worker(self, worker_scheduler):
        fired = threading.Event()
        seen = []

        def on_done(op):
            seen.append((op.result(), threading.current_thread().name))
            fired.set()

        gate = threading.Event()
        operation = worker_scheduler.start(lambda: gate.wait(5) and "ok")
        operation.add_done_callback(on_done)
        gate.set()

        assert fired.wait(5)
        assert seen[0][0] == "ok"
        assert seen[0][1].startswith("svnbridge")

    def test_callback_added_after_completion(self, worker_scheduler):
        operation = worker_scheduler.start(lambda: 1)
        operation.wait(5)
        fired = threading.Event()
        operation.add_done_callback(lambda op: fired.set())
        assert fired.wait(5)

    def test_failing_callback_is_logged(self, worker_scheduler, caplog):
        fired = threading.Event()

        def bad(op):
            raise ValueError("callback bug")

        operation = worker_scheduler.start(lambda: 1)
        operation.add_done_callback(bad)
        operation.add_done_callback(lambda op: fired.set())
        assert fired.wait(5)
        assert "Completion callback of an svn operation failed" in caplog.text


class TestPollDispatch:
    def test_callbacks_only_on_poll(self, poll_scheduler):
        seen = []
        gate = threading.Event()
        operation = poll_scheduler.start(lambda: gate.wait(5) and "done")
        operation.add_done_callback(lambda op: seen.append(threading.current_thread()))
        gate.set()
        operation.wait(5)
        time.sleep(0.05)

        assert seen == []
        assert _poll_until(poll_scheduler, 1) == 1
        assert seen == [threading.current_thread()]

    def test_poll_without_work(self, poll_scheduler):
        assert poll_scheduler.poll() == 0

    def test_invalid_dispatch(self):
        with pytest.raises(ValueError):
            OperationScheduler(dispatch="ui")


class TestAbandon:
    def test_abandoned_never_calls_back(self, worker_scheduler):
        gate = threading.Event()
        seen = []
        operation = worker_scheduler.start(gate.wait, 5)
        operation.add_done_callback(lambda op: seen.append(op))

        operation.abandon()
        gate.set()
        worker_scheduler.shutdown(wait=True)

        assert seen == []
        assert operation.abandoned
        assert operation.token.cancelled
        with pytest.raises(OperationAbandoned):
            operation.result()

    def test_abandoned_in_poll_mode(self, poll_scheduler):
        seen = []
        operation = poll_scheduler.start(lambda: 1)
        operation.add_done_callback(lambda op: seen.append(op))
        operation.abandon()
        time.sleep(0.05)
        poll_scheduler.poll()
        assert seen == []

    def test_abandoned_operations_are_not_retained(self, worker_scheduler):
        gate = threading.Event()
        operations = [worker_scheduler.start(gate.wait, 5) for _ in range(20)]
        for operation in operations:
            operation.abandon()
        gate.set()
        time.sleep(0.2)

        assert worker_scheduler._in_flight == []
        assert worker_scheduler.poll() == 0

    def test_abandoned_pending_dropped_from_queue(self, poll_scheduler):
        operation = poll_scheduler.start(lambda: 1)
        assert operation.wait(5)
        time.sleep(0.05)
        operation.abandon()
        assert poll_scheduler.poll() == 0
        assert poll_scheduler._in_flight == []

    def test_long_job_sees_cancellation(self, worker_scheduler):
        started = threading.Event()

        def job(token):
            started.set()
            deadline = time.monotonic() + 5
            while not token.cancelled and time.monotonic() < deadline:
                time.sleep(0.01)
            return token.cancelled

        operation = worker_scheduler.start(job)
        assert started.wait(5)
        operation.abandon()
        assert operation.token.cancelled


class TestShutdown:
    def test_shutdown_drops_in_flight(self):
        scheduler = OperationScheduler(max_workers=1)
        gate = threading.Event()
        seen = []
        operation = scheduler.start(gate.wait, 5)
        operation.add_done_callback(lambda op: seen.append(op))

        scheduler.shutdown(wait=False)
        gate.set()
        time.sleep(0.1)

        assert operation.abandoned
        assert seen == []
        assert scheduler.closed

    def test_start_after_shutdown_raises(self):
        scheduler = OperationScheduler(max_workers=1)
        scheduler.shutdown()
        with pytest.raises(RuntimeError):
            scheduler.start(lambda: 1)

    def test_default_scheduler_recreated_after_shutdown(self):
        first = get_default_scheduler()
        assert get_default_scheduler() is first
        first.shutdown(wait=True)
        second = get_default_scheduler()
        assert second is not first
        assert not second.closed
