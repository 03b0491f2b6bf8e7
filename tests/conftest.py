"""
Shared fixtures for the TUP900 agent tests.

FakeChannelFactory stands in for the printer device path: it records every
open (path, read flag) and every byte written, and serves canned ASB bytes
on read.
"""

import threading
from typing import Callable, List, Optional, Tuple

import pytest

from core.device_channel import DeviceChannel
from core.exceptions import DeviceUnavailableError
from models.printer_config import PrinterConfigStore
from services.device_worker import DeviceWorker
from services.event_publisher import OutboxEventPublisher
from services.method_dispatcher import MethodDispatcher
from services.printer_service import PrinterService


DEFAULT_TEST_PATH = "/dev/usb/lp1"


class FakeChannel(DeviceChannel):
    """In-memory DeviceChannel."""

    def __init__(
        self,
        path: str,
        read_data: bytes = b"",
        read_error: Optional[Exception] = None,
        on_write: Optional[Callable[[], None]] = None
    ):
        super().__init__(path)
        self.written = bytearray()
        self.read_data = read_data
        self.read_error = read_error
        self.on_write = on_write
        self.close_count = 0

    def _write_some(self, data: memoryview) -> int:
        if self.on_write is not None:
            self.on_write()
        self.written.extend(data)
        return len(data)

    def _read_some(self, size: int, timeout: float) -> bytes:
        if self.read_error is not None:
            raise self.read_error
        return self.read_data[:size]

    def _close(self) -> None:
        self.close_count += 1


class FakeChannelFactory:
    """ChannelFactory that creates FakeChannels and remembers them."""

    def __init__(
        self,
        read_data: bytes = b"",
        read_error: Optional[Exception] = None,
        open_error: Optional[str] = None,
        on_write: Optional[Callable[[], None]] = None
    ):
        self.read_data = read_data
        self.read_error = read_error
        self.open_error = open_error
        self.on_write = on_write
        self.opened: List[Tuple[str, bool]] = []
        self.channels: List[FakeChannel] = []
        self._lock = threading.Lock()

    def __call__(self, path: str, read: bool) -> FakeChannel:
        with self._lock:
            self.opened.append((path, read))
        if self.open_error is not None:
            raise DeviceUnavailableError(path, self.open_error)
        channel = FakeChannel(path, self.read_data, self.read_error, self.on_write)
        with self._lock:
            self.channels.append(channel)
        return channel

    @property
    def written(self) -> bytes:
        return b"".join(bytes(c.written) for c in self.channels)


def asb(byte5: int = 0x00, byte8: int = 0x00, length: int = 10) -> bytes:
    """Build an ASB buffer with the roll (5) and presenter (8) bytes set."""
    buffer = bytearray(length)
    if length > 5:
        buffer[5] = byte5
    if length > 8:
        buffer[8] = byte8
    return bytes(buffer)


# Fixtures

@pytest.fixture
def channel_factory():
    """Factory whose channels accept all writes and answer reads with an empty ASB."""
    return FakeChannelFactory(read_data=asb())


@pytest.fixture
def worker():
    """Running DeviceWorker, stopped after the test."""
    device_worker = DeviceWorker(name="TestDeviceWorker")
    device_worker.start()
    yield device_worker
    device_worker.stop()


@pytest.fixture
def publisher():
    return OutboxEventPublisher(max_events=50)


@pytest.fixture
def config_store():
    return PrinterConfigStore(default_path=DEFAULT_TEST_PATH)


@pytest.fixture
def make_dispatcher(worker, publisher, config_store):
    """Build a MethodDispatcher around a given channel factory."""

    def _make(factory, encoder=None, operation_timeout=5.0, event_publisher=None):
        service = PrinterService(channel_factory=factory, status_read_timeout=0.1)
        return MethodDispatcher(
            device_id="edge-device-01",
            module_id="tup900",
            config_store=config_store,
            printer_service=service,
            worker=worker,
            publisher=event_publisher or publisher,
            encoder=encoder,
            output_name="output1",
            operation_timeout=operation_timeout,
        )

    return _make
