"""
Custom exceptions for the TUP900 printer agent.

Exception Hierarchy:
    PrinterAgentError (base)
    ├── DeviceError                 - Device channel failures (runtime, 500)
    │   ├── DeviceUnavailableError  - Channel cannot be opened
    │   ├── DeviceWriteError        - Write did not complete
    │   └── DeviceTimeoutError      - Bounded read/write wait expired
    ├── MalformedRequestError       - Print payload has the wrong shape (500)
    │   └── NameEncodingError       - Name rejected by the strict policy
    ├── EventPublishError           - Event send failed (logged only)
    └── ConfigurationError          - Desired property rejected (logged only)

Usage:
    Device and request errors are caught at the method boundary and turned
    into a structured response. Event and configuration errors never fail a
    method response.
"""

from typing import Optional, Dict, Any


class PrinterAgentError(Exception):
    """
    Base exception for all printer agent errors.

    All custom exceptions inherit from this class, allowing callers to catch
    all application-specific errors with a single except clause if needed.
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        """
        Initialize the exception.

        Args:
            message: Human-readable error message
            details: Optional dictionary with additional context for debugging
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return self.message


# =============================================================================
# DEVICE ERRORS - Raised by the device channel
# =============================================================================

class DeviceError(PrinterAgentError):
    """Base class for failures talking to the printer device path."""

    def __init__(
        self,
        message: str,
        device_path: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        error_details = details or {}
        if device_path:
            error_details["device_path"] = device_path
        super().__init__(message, error_details)
        self.device_path = device_path


class DeviceUnavailableError(DeviceError):
    """
    The device path could not be opened.

    Typical causes:
    - Printer unplugged or powered off
    - Wrong PRINTER_PATH / printerPath desired property
    - Process user not in the 'lp' group
    """

    def __init__(self, device_path: str, reason: str):
        message = f"Could not open printer device '{device_path}': {reason}"
        super().__init__(message, device_path, {"reason": reason})
        self.reason = reason


class DeviceWriteError(DeviceError):
    """A write to the device did not complete (closed channel or partial write)."""

    def __init__(self, device_path: str, written: int, expected: int, reason: str = ""):
        message = f"Wrote {written} of {expected} bytes to '{device_path}'"
        if reason:
            message = f"{message}: {reason}"
        details = {"written": written, "expected": expected}
        super().__init__(message, device_path, details)
        self.written = written
        self.expected = expected


class DeviceTimeoutError(DeviceError):
    """
    The device was not ready to read (or write) within the timeout.

    A read timeout during a status request becomes a "timed out" outcome
    instead of failing the method call; a write timeout is a failure.
    """

    def __init__(self, device_path: str, timeout_seconds: float, operation: str = "read"):
        if operation == "read":
            message = f"No data from '{device_path}' within {timeout_seconds:.1f}s"
        else:
            message = f"'{device_path}' not ready to {operation} within {timeout_seconds:.1f}s"
        details = {"timeout_seconds": timeout_seconds, "operation": operation}
        super().__init__(message, device_path, details)
        self.timeout_seconds = timeout_seconds
        self.operation = operation


# =============================================================================
# REQUEST ERRORS - Method payloads that cannot be processed
# =============================================================================

class MalformedRequestError(PrinterAgentError):
    """The method payload is not the JSON shape the method expects."""

    def __init__(self, message: str, payload: Optional[bytes] = None):
        details = {}
        if payload is not None:
            details["payload_size"] = len(payload)
        super().__init__(message, details)


class NameEncodingError(MalformedRequestError):
    """The display name contains characters the printer cannot represent."""

    def __init__(self, name: str, offending: str):
        message = (
            f"Name contains characters outside printable ASCII: "
            f"{', '.join(repr(c) for c in offending)}"
        )
        super().__init__(message)
        self.name = name
        self.offending = offending


# =============================================================================
# SIDE-CHANNEL ERRORS - Logged, never fail the method response
# =============================================================================

class EventPublishError(PrinterAgentError):
    """Sending an event to the output channel failed."""

    def __init__(self, output_name: str, reason: str):
        message = f"Failed to publish event on '{output_name}': {reason}"
        super().__init__(message, {"output_name": output_name})
        self.output_name = output_name


class ConfigurationError(PrinterAgentError):
    """A desired-property update was rejected; the previous value stays in effect."""

    def __init__(self, key: str, value: Any, reason: str):
        message = f"Rejected desired property '{key}': {reason}"
        super().__init__(message, {"key": key, "value": repr(value)})
        self.key = key
