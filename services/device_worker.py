"""
Device worker - the single owner of the printer device channel.

Print and status operations must never interleave on the device: a status
request written in the middle of a print job corrupts the job and the ASB
reply can no longer be matched to its request. All device operations are
therefore queued to one background thread that runs them one at a time.

Thread Model:
    Request threads (Flask)
    └── submit(operation) -> Future   (never touch the device themselves)

    DeviceWorker thread
    └── runs queued operations in FIFO order, one at a time

Usage:
    # At app startup
    worker = DeviceWorker()
    worker.start()

    # In a request handler
    future = worker.submit(printer_service.run_print_job, config, data)
    result = future.result(timeout=30)

    # At app shutdown
    worker.stop()
"""

from __future__ import annotations

import queue
import threading
from concurrent.futures import Future
from typing import Any, Callable, Optional, Tuple

from logging_config import get_logger, set_thread_name


# Module logger
logger = get_logger(__name__)

_STOP = object()


class DeviceWorker:
    """
    Background thread that serializes device operations.

    Attributes:
        is_running: Whether the worker thread is active
        pending: Number of operations waiting in the queue
    """

    def __init__(self, name: str = "DeviceWorker"):
        self._name = name
        self._queue: "queue.Queue[Any]" = queue.Queue()
        self._thread: Optional[threading.Thread] = None
        self._is_running = False
        self._lock = threading.Lock()

    @property
    def is_running(self) -> bool:
        return self._is_running

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    def start(self) -> None:
        """
        Start the worker thread.

        Safe to call multiple times - only starts if not already running.
        """
        with self._lock:
            if self._is_running:
                logger.warning("DeviceWorker already running")
                return

            self._thread = threading.Thread(
                target=self._run_loop,
                name=self._name,
                daemon=True
            )
            self._is_running = True
            self._thread.start()

        logger.info("Device worker thread started")

    def stop(self, timeout: float = 5.0) -> None:
        """
        Stop the worker after the operations already queued have run.

        Safe to call multiple times.
        """
        with self._lock:
            if not self._is_running:
                return
            self._is_running = False
            thread = self._thread
            self._thread = None

        logger.info("Stopping device worker thread...")
        self._queue.put(_STOP)

        if thread and thread.is_alive():
            thread.join(timeout=timeout)
            if thread.is_alive():
                logger.warning("Device worker thread did not stop cleanly")

        logger.info("Device worker thread stopped")

    def submit(self, operation: Callable[..., Any], *args: Any) -> Future:
        """
        Queue ``operation(*args)`` to run on the worker thread.

        Returns:
            Future resolved with the operation's return value or exception

        Raises:
            RuntimeError: If the worker is not running
        """
        if not self._is_running:
            raise RuntimeError("DeviceWorker is not running - call start() first")

        future: Future = Future()
        self._queue.put((future, operation, args))
        return future

    def _run_loop(self) -> None:
        set_thread_name(self._name)
        logger.info("Device worker loop starting")

        while True:
            item = self._queue.get()
            if item is _STOP:
                break
            self._run_one(*item)

        # Anything queued after stop() never runs; release its callers
        self._cancel_remaining()
        logger.info("Device worker loop exiting")

    def _run_one(self, future: Future, operation: Callable[..., Any], args: Tuple[Any, ...]) -> None:
        if not future.set_running_or_notify_cancel():
            return
        try:
            result = operation(*args)
        except Exception as e:
            logger.debug(f"Device operation {getattr(operation, '__name__', operation)} raised {e!r}")
            future.set_exception(e)
        else:
            future.set_result(result)

    def _cancel_remaining(self) -> None:
        while True:
            try:
                item = self._queue.get_nowait()
            except queue.Empty:
                return
            if item is not _STOP:
                item[0].cancel()
