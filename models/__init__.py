"""
Data models for the TUP900 printer agent.

This module contains:
- PrinterConfig: Frozen configuration snapshot taken per operation
- PrinterConfigStore: Holder of the active snapshot (desired properties)
- PrintJobRequest: Parsed print method payload
- PrintResponse / StatusResponse: Method response bodies
- MethodResponse / EventMessage: Wire envelopes for responses and events
"""

from .printer_config import PrinterConfig, PrinterConfigStore, DEFAULT_PRINTER_PATH
from .print_request import PrintJobRequest
from .method_response import PrintResponse, StatusResponse, MethodResponse, EventMessage

__all__ = [
    # Configuration
    "PrinterConfig",
    "PrinterConfigStore",
    "DEFAULT_PRINTER_PATH",
    # Requests
    "PrintJobRequest",
    # Responses and events
    "PrintResponse",
    "StatusResponse",
    "MethodResponse",
    "EventMessage",
]
