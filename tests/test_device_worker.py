"""Tests for the single-owner device worker."""

import threading
import time

import pytest

from services.device_worker import DeviceWorker


class TestDeviceWorker:

    def test_runs_operation_and_returns_result(self, worker):
        future = worker.submit(lambda a, b: a + b, 2, 3)
        assert future.result(timeout=2) == 5

    def test_exception_is_delivered_to_caller(self, worker):
        def boom():
            raise OSError("device gone")

        future = worker.submit(boom)
        with pytest.raises(OSError, match="device gone"):
            future.result(timeout=2)

        # The worker survives a failing operation
        assert worker.submit(lambda: "still alive").result(timeout=2) == "still alive"

    def test_operations_never_overlap(self, worker):
        """Operations submitted from many threads run strictly one at a time."""
        active = []
        overlaps = []
        lock = threading.Lock()

        def operation(index):
            with lock:
                active.append(index)
                if len(active) > 1:
                    overlaps.append(tuple(active))
            time.sleep(0.005)
            with lock:
                active.remove(index)
            return index

        futures = []
        futures_lock = threading.Lock()

        def client(start):
            for i in range(start, start + 5):
                f = worker.submit(operation, i)
                with futures_lock:
                    futures.append(f)

        threads = [threading.Thread(target=client, args=(n * 5,)) for n in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        results = sorted(f.result(timeout=5) for f in futures)
        assert results == list(range(20))
        assert overlaps == []

    def test_runs_on_named_thread(self, worker):
        future = worker.submit(lambda: threading.current_thread().name)
        assert future.result(timeout=2) == "TestDeviceWorker"

    def test_submit_requires_start(self):
        idle = DeviceWorker()
        with pytest.raises(RuntimeError):
            idle.submit(lambda: None)

    def test_stop_is_idempotent(self):
        device_worker = DeviceWorker()
        device_worker.start()
        device_worker.start()
        assert device_worker.is_running

        device_worker.stop()
        device_worker.stop()
        assert not device_worker.is_running

    def test_queued_work_finishes_before_stop(self):
        device_worker = DeviceWorker()
        device_worker.start()
        futures = [device_worker.submit(time.sleep, 0.01) for _ in range(3)]

        device_worker.stop()

        assert all(f.done() for f in futures)
