"""
IoT Edge hub binding.

Connects the agent to the edge runtime through an IoTHubModuleClient:

    direct methods "print" / "status"  -> MethodDispatcher.invoke
    desired property patches           -> MethodDispatcher.handle_desired_properties
    reported properties                <- every applied patch
    events                             -> send_message_to_output (output1)

The Flask surface stays available alongside for local use. Reconnect is not
handled here: the container runtime restarts the process when the connection
is lost, and connection state changes are only logged.
"""

from __future__ import annotations

import json
from typing import Any, Dict, Optional

from azure.iot.device import IoTHubModuleClient, Message
from azure.iot.device import MethodResponse as DirectMethodResponse

from core.exceptions import EventPublishError
from models.method_response import EventMessage
from services.event_publisher import OutboxEventPublisher
from services.method_dispatcher import MethodDispatcher
from logging_config import get_logger


# Module logger
logger = get_logger(__name__)


def create_module_client() -> IoTHubModuleClient:
    """Create a module client from the IOTEDGE_* environment of the edge runtime."""
    return IoTHubModuleClient.create_from_edge_environment()


def payload_bytes(payload: Any) -> bytes:
    """
    Turn a direct-method payload back into the raw JSON bytes the dispatcher parses.

    The client hands over the payload already JSON-decoded (None when empty).
    """
    if payload is None:
        return b""
    if isinstance(payload, (bytes, bytearray)):
        return bytes(payload)
    return json.dumps(payload).encode("utf-8")


class EdgeHubEventPublisher(OutboxEventPublisher):
    """
    Sends events to a module output and keeps the sent ones in the local outbox.

    Raises EventPublishError when the hub send fails; the event is then not
    recorded.
    """

    def __init__(self, client: IoTHubModuleClient, max_events: int = 100):
        super().__init__(max_events=max_events)
        self._client = client

    def send_event(self, message: EventMessage) -> None:
        hub_message = Message(
            message.body,
            content_encoding=message.content_encoding,
            content_type=message.content_type,
        )
        try:
            self._client.send_message_to_output(hub_message, message.output_name)
        except Exception as e:
            raise EventPublishError(message.output_name, str(e)) from e
        super().send_event(message)


class EdgeHubBridge:
    """
    Routes edge hub callbacks to a MethodDispatcher.

    Lifecycle:
        bridge = EdgeHubBridge(client, dispatcher)
        bridge.start()   # handlers, connect, initial twin sync
        ...
        bridge.stop()    # shutdown, idempotent
    """

    def __init__(self, client: IoTHubModuleClient, dispatcher: MethodDispatcher):
        self._client = client
        self._dispatcher = dispatcher
        self._running = False
        dispatcher.add_reported_listener(self._report_properties)

    @property
    def is_running(self) -> bool:
        return self._running

    def start(self) -> None:
        if self._running:
            return

        self._client.on_connection_state_change = self._on_connection_state_change
        self._client.on_method_request_received = self._on_method_request
        self._client.on_twin_desired_properties_patch_received = self._on_desired_patch

        self._client.connect()
        self._running = True
        logger.info(
            f"Connected to edge hub as '{self._dispatcher.device_id}'-'{self._dispatcher.module_id}'"
        )

        twin = self._client.get_twin()
        desired = twin.get("desired", {}) if twin else {}
        logger.info(f"Initial desired properties: {desired}")
        self._dispatcher.handle_desired_properties(desired)

    def stop(self) -> None:
        if not self._running:
            return
        self._running = False
        try:
            self._client.shutdown()
        except Exception as e:
            logger.warning(f"Edge hub shutdown failed: {e}")
        logger.info("Edge hub client shut down")

    # =========================================================================
    # CLIENT CALLBACKS (run on the client's handler threads)
    # =========================================================================

    def _on_connection_state_change(self) -> None:
        logger.warning(f"Connection changed: connected={self._client.connected}")

    def _on_method_request(self, method_request) -> None:
        name = method_request.name

        if self._dispatcher.has_method(name):
            response = self._dispatcher.invoke(name, payload_bytes(method_request.payload))
            status, body = response.status, response.json()
        else:
            logger.warning(f"Unknown method '{name}' invoked")
            status = 501
            body = {
                "error": f"Unknown method '{name}'",
                "methods": list(self._dispatcher.method_names),
            }

        reply = DirectMethodResponse.create_from_method_request(method_request, status, body)
        try:
            self._client.send_method_response(reply)
        except Exception as e:
            logger.error(f"Exception '{e}' while sending response to method '{name}'")

    def _on_desired_patch(self, patch: Optional[Dict[str, Any]]) -> None:
        logger.info(f"Desired property patch received: {patch}")
        self._dispatcher.handle_desired_properties(patch or {})

    def _report_properties(self, reported: Dict[str, Any]) -> None:
        if not self._running:
            return
        self._client.patch_twin_reported_properties(reported)
        logger.info(f"Reported properties sent: {reported}")
