"""
Tests for the device channel.

Pipes stand in for the printer character device: they support select() and
let the tests control exactly when data becomes readable.
"""

import os
import time

import pytest

from core.device_channel import DeviceChannel, FileDeviceChannel, open_device_channel
from core.exceptions import DeviceTimeoutError, DeviceUnavailableError, DeviceWriteError


@pytest.fixture
def pipe():
    read_fd, write_fd = os.pipe()
    yield read_fd, write_fd
    for fd in (read_fd, write_fd):
        try:
            os.close(fd)
        except OSError:
            pass


class StallingChannel(DeviceChannel):
    """Accepts a few bytes, then nothing."""

    def __init__(self, accept: int):
        super().__init__("/dev/stall")
        self.accept = accept

    def _write_some(self, data):
        count = min(self.accept, len(data))
        self.accept -= count
        return count

    def _read_some(self, size, timeout):
        return b""

    def _close(self):
        pass


class TestOpen:

    def test_missing_path(self, tmp_path):
        missing = str(tmp_path / "lp9")
        with pytest.raises(DeviceUnavailableError) as exc_info:
            open_device_channel(missing)
        assert exc_info.value.device_path == missing
        assert missing in str(exc_info.value)

    def test_write_to_file(self, tmp_path):
        target = tmp_path / "lp1"
        target.write_bytes(b"")

        with open_device_channel(str(target)) as channel:
            assert channel.write(b"\x1b\x64\x02") == 3

        assert channel.closed
        assert target.read_bytes() == b"\x1b\x64\x02"


class TestReadWrite:

    def test_read_times_out(self, pipe):
        read_fd, _ = pipe
        channel = FileDeviceChannel("pipe", read_fd)

        started = time.monotonic()
        with pytest.raises(DeviceTimeoutError) as exc_info:
            channel.read(10, timeout=0.05)

        assert time.monotonic() - started < 2.0
        assert exc_info.value.timeout_seconds == 0.05

    def test_read_available_bytes(self, pipe):
        read_fd, write_fd = pipe
        os.write(write_fd, bytes(range(10)))
        channel = FileDeviceChannel("pipe", read_fd)

        assert channel.read(10, timeout=1.0) == bytes(range(10))

    def test_write_through_pipe(self, pipe):
        read_fd, write_fd = pipe
        channel = FileDeviceChannel("pipe", write_fd)

        channel.write(b"\x1b\x1e\x61\x04")

        assert os.read(read_fd, 10) == b"\x1b\x1e\x61\x04"

    def test_write_after_close(self):
        channel = StallingChannel(accept=100)
        channel.close()
        with pytest.raises(DeviceWriteError):
            channel.write(b"abc")

    def test_partial_write_fails(self):
        channel = StallingChannel(accept=2)
        with pytest.raises(DeviceWriteError) as exc_info:
            channel.write(b"abcdef")
        assert exc_info.value.written == 2
        assert exc_info.value.expected == 6

    def test_read_after_close_is_empty(self):
        channel = StallingChannel(accept=0)
        channel.close()
        assert channel.read(10, timeout=0.1) == b""

    def test_write_times_out_when_device_is_full(self, pipe):
        _, write_fd = pipe
        os.set_blocking(write_fd, False)
        try:
            while True:
                os.write(write_fd, b"\x00" * 4096)
        except BlockingIOError:
            pass
        channel = FileDeviceChannel("pipe", write_fd, write_timeout=0.05)

        with pytest.raises(DeviceTimeoutError) as exc_info:
            channel.write(b"\x1b\x64\x02")

        assert exc_info.value.operation == "write"
        assert "not ready to write" in str(exc_info.value)

    def test_default_logger_is_namespaced(self, pipe):
        read_fd, _ = pipe
        channel = FileDeviceChannel("pipe", read_fd)
        assert channel._logger.name == "tup900_agent.core.device_channel"
