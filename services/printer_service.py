"""
Printer device operations.

The two operations here are the only code that opens the device path. Both
run on the DeviceWorker thread and take the PrinterConfig snapshot captured
when the method was invoked, so a path change never reaches an operation
that is already queued or running.

    run_print_job     open (write) -> write job bytes -> close
    run_status_query  open (read/write) -> write enableStatusReporting
                      -> read ASB (bounded) -> close -> decode
"""

from __future__ import annotations

from typing import Optional

from core.device_channel import ChannelFactory, open_device_channel
from core.exceptions import DeviceTimeoutError
from models.printer_config import PrinterConfig
from modules import status_decoder
from modules.star_commands import lookup
from modules.status_decoder import DeviceStatus
from logging_config import get_logger


# Module logger
logger = get_logger(__name__)


class PrinterService:
    """
    Device operations for one TUP900.

    Attributes:
        status_read_timeout: Seconds to wait for the ASB reply
        status_response_size: Bytes requested from the device for the ASB
    """

    def __init__(
        self,
        channel_factory: Optional[ChannelFactory] = None,
        status_read_timeout: float = 2.0,
        status_response_size: int = status_decoder.ASB_REQUEST_SIZE
    ):
        if status_read_timeout <= 0:
            raise ValueError("status_read_timeout must be positive")
        if status_response_size < status_decoder.ASB_MIN_LENGTH:
            raise ValueError(
                f"status_response_size must be at least {status_decoder.ASB_MIN_LENGTH}"
            )

        self._open_channel = channel_factory or open_device_channel
        self.status_read_timeout = status_read_timeout
        self.status_response_size = status_response_size

    def run_print_job(self, config: PrinterConfig, job: bytes) -> int:
        """
        Write an encoded job to the printer.

        Args:
            config: Snapshot taken when the print method was invoked
            job: Output of PrintJobEncoder.encode()

        Returns:
            Number of bytes written

        Raises:
            DeviceUnavailableError: If the device cannot be opened
            DeviceWriteError: If the write does not complete
            DeviceTimeoutError: If the device stays busy past the write timeout
        """
        path = config.printer_path
        logger.debug(f"Opening {path} for print job ({len(job)} bytes)")

        with self._open_channel(path, False) as channel:
            written = channel.write(job)
            channel.flush()

        logger.info(f"Print job written to {path} ({written} bytes)")
        return written

    def run_status_query(self, config: PrinterConfig) -> DeviceStatus:
        """
        Request and decode an Automatic Status Block.

        No reply, a short reply and a read timeout are all returned as
        DeviceStatus outcomes rather than raised.

        Raises:
            DeviceUnavailableError: If the device cannot be opened
            DeviceWriteError: If the status request cannot be written
            DeviceTimeoutError: If the device will not accept the request in time
        """
        path = config.printer_path
        enable = lookup("enableStatusReporting")

        with self._open_channel(path, True) as channel:
            channel.write(enable.data)
            channel.flush()
            try:
                raw = channel.read(self.status_response_size, self.status_read_timeout)
            except DeviceTimeoutError as e:
                logger.warning(f"Status read timed out: {e}")
                return status_decoder.timed_out(self.status_read_timeout)

        status = status_decoder.decode(raw)

        if status.raw:
            logger.info(f"Asb status list: {status.raw_hex}")

        if status.is_complete:
            logger.info("Paper Taken or Collected" if status.paper_collected else "Paper still in slot")
            logger.info("Roll missing" if status.roll_missing else "Roll placed")
        else:
            logger.info(status.message)

        return status
