"""
Services layer for the TUP900 printer agent.

This module contains:
- DeviceWorker: Single background thread that owns the printer device
- PrinterService: Print and status device operations
- EventPublisher / OutboxEventPublisher: Event output
- MethodDispatcher: Method and desired-property handling
- EdgeHubBridge / EdgeHubEventPublisher: Binding to the IoT Edge hub

Thread Model:
    Request threads (Flask)
    └── MethodDispatcher -> DeviceWorker.submit() -> Future

    DeviceWorker thread
    └── PrinterService operations, strictly one at a time
"""

from .device_worker import DeviceWorker
from .printer_service import PrinterService
from .event_publisher import EventPublisher, OutboxEventPublisher, publish_event
from .method_dispatcher import MethodDispatcher
from .edge_hub import EdgeHubBridge, EdgeHubEventPublisher, create_module_client

__all__ = [
    "DeviceWorker",
    "PrinterService",
    "EventPublisher",
    "OutboxEventPublisher",
    "publish_event",
    "MethodDispatcher",
    "EdgeHubBridge",
    "EdgeHubEventPublisher",
    "create_module_client",
]
