"""
Printer device channel.

The TUP900 shows up as a character device (``/dev/usb/lp1`` on the edge
host). Every operation opens the path, performs its writes and at most one
read, and closes it again - the channel is never kept open between method
calls.

RESOURCE RULES:
    - Use DeviceChannel as a context manager so the descriptor is closed on
      every exit path, including errors
    - Writes loop until all bytes are accepted; a zero-length write means
      the device went away
    - Reads wait at most ``timeout`` seconds (select) and never block forever;
      writes wait at most ``write_timeout`` seconds for the device to drain

Usage:
    with FileDeviceChannel.open(path, read=True) as channel:
        channel.write(command)
        raw = channel.read(10, timeout=2.0)
"""

from __future__ import annotations

import logging
import os
import select
from typing import Callable, Optional

from logging_config import get_logger
from .exceptions import DeviceUnavailableError, DeviceWriteError, DeviceTimeoutError


class DeviceChannel:
    """
    Abstract duplex byte channel to the printer.

    Subclasses implement _write_some(), _read_some() and _close().
    Tests substitute in-memory channels through a ChannelFactory.
    """

    def __init__(self, path: str):
        self.path = path
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def write(self, data: bytes) -> int:
        """
        Write all of ``data`` to the device.

        Returns:
            Number of bytes written (always len(data))

        Raises:
            DeviceWriteError: If the channel is closed or stops accepting bytes
            DeviceTimeoutError: If the device stays busy past the write timeout
        """
        if self._closed:
            raise DeviceWriteError(self.path, 0, len(data), "channel is closed")

        view = memoryview(data)
        written = 0
        while written < len(data):
            try:
                count = self._write_some(view[written:])
            except OSError as e:
                raise DeviceWriteError(self.path, written, len(data), str(e)) from e
            if not count:
                raise DeviceWriteError(self.path, written, len(data), "device accepted no data")
            written += count
        return written

    def read(self, size: int, timeout: float) -> bytes:
        """
        Read up to ``size`` bytes, waiting at most ``timeout`` seconds.

        Returns:
            The bytes read; empty when the device reports end of data

        Raises:
            DeviceTimeoutError: If nothing arrived before the timeout
        """
        if self._closed:
            return b""
        return self._read_some(size, timeout)

    def flush(self) -> None:
        """Push buffered bytes to the device (os.write is unbuffered, so a no-op here)."""

    def close(self) -> None:
        if not self._closed:
            self._closed = True
            self._close()

    def __enter__(self) -> "DeviceChannel":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _write_some(self, data: memoryview) -> int:
        raise NotImplementedError

    def _read_some(self, size: int, timeout: float) -> bytes:
        raise NotImplementedError

    def _close(self) -> None:
        raise NotImplementedError


class FileDeviceChannel(DeviceChannel):
    """DeviceChannel over an OS file descriptor (printer character device)."""

    DEFAULT_WRITE_TIMEOUT = 10.0

    def __init__(
        self,
        path: str,
        fd: int,
        logger: Optional[logging.Logger] = None,
        write_timeout: float = DEFAULT_WRITE_TIMEOUT
    ):
        super().__init__(path)
        self._fd = fd
        self._logger = logger or get_logger(__name__)
        self.write_timeout = write_timeout

    @classmethod
    def open(
        cls,
        path: str,
        read: bool = False,
        logger: Optional[logging.Logger] = None,
        write_timeout: float = DEFAULT_WRITE_TIMEOUT
    ) -> "FileDeviceChannel":
        """
        Open the device path for writing (and reading when ``read`` is set).

        Raises:
            DeviceUnavailableError: If the path is missing, busy or not permitted
        """
        flags = os.O_RDWR if read else os.O_WRONLY
        try:
            fd = os.open(path, flags)
        except OSError as e:
            raise DeviceUnavailableError(path, e.strerror or str(e)) from e
        return cls(path, fd, logger, write_timeout)

    def _write_some(self, data: memoryview) -> int:
        _, ready, _ = select.select([], [self._fd], [], self.write_timeout)
        if not ready:
            raise DeviceTimeoutError(self.path, self.write_timeout, "write")
        return os.write(self._fd, data)

    def _read_some(self, size: int, timeout: float) -> bytes:
        ready, _, _ = select.select([self._fd], [], [], timeout)
        if not ready:
            raise DeviceTimeoutError(self.path, timeout)
        return os.read(self._fd, size)

    def _close(self) -> None:
        try:
            os.close(self._fd)
        except OSError as e:
            self._logger.warning(f"Closing {self.path} failed: {e}")


# A factory receives (path, read) and returns an open DeviceChannel
ChannelFactory = Callable[[str, bool], DeviceChannel]


def open_device_channel(
    path: str,
    read: bool = False,
    write_timeout: float = FileDeviceChannel.DEFAULT_WRITE_TIMEOUT
) -> DeviceChannel:
    """Default ChannelFactory: open the real device path."""
    return FileDeviceChannel.open(path, read=read, write_timeout=write_timeout)
