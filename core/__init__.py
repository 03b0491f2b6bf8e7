"""
Core module for the TUP900 printer agent.

Contains fundamental infrastructure components:
- exceptions: Custom exception hierarchy
- device_channel: Scoped duplex byte channel to the printer device path
"""

from .exceptions import (
    PrinterAgentError,
    DeviceError,
    DeviceUnavailableError,
    DeviceWriteError,
    DeviceTimeoutError,
    MalformedRequestError,
    NameEncodingError,
    EventPublishError,
    ConfigurationError,
)
from .device_channel import DeviceChannel, FileDeviceChannel, open_device_channel

__all__ = [
    "PrinterAgentError",
    "DeviceError",
    "DeviceUnavailableError",
    "DeviceWriteError",
    "DeviceTimeoutError",
    "MalformedRequestError",
    "NameEncodingError",
    "EventPublishError",
    "ConfigurationError",
    "DeviceChannel",
    "FileDeviceChannel",
    "open_device_channel",
]
