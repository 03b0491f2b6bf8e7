"""
Method dispatcher - the control-plane boundary of the agent.

Receives named method invocations (``print``, ``status``) and desired-
property patches, runs them against the printer, and produces:

    1. A synchronous MethodResponse (UTF-8 JSON payload + status code)
    2. An event with the same JSON body on the configured output

Error Policy:
    - Every failure inside an invocation is caught here and becomes a 500
      response with the error text embedded in "status"
    - No/short/timed-out status reads are soft successes (200, flags False)
    - Event publishing failures are logged and never change the response
    - Rejected desired properties are logged; the previous value stays

Flow (print):
    1. Snapshot PrinterConfig (the path this call will use, whatever happens
       to the store afterwards)
    2. Parse the payload, encode the job (both on the request thread)
    3. Queue the write on the DeviceWorker and wait for it (bounded)
    4. Build PrintResponse, publish it, return it
"""

from __future__ import annotations

import threading
from concurrent.futures import Future, TimeoutError as FutureTimeoutError
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from core.exceptions import ConfigurationError, PrinterAgentError
from models.method_response import MethodResponse, PrintResponse, StatusResponse
from models.print_request import PrintJobRequest
from models.printer_config import PRINTER_PATH_PROPERTY, PrinterConfigStore
from modules.job_encoder import PrintJobEncoder
from services.device_worker import DeviceWorker
from services.event_publisher import EventPublisher, publish_event
from services.printer_service import PrinterService
from logging_config import get_logger


# Module logger
logger = get_logger(__name__)

PRINT_METHOD = "print"
STATUS_METHOD = "status"

DEFAULT_OUTPUT_NAME = "output1"

ReportedListener = Callable[[Dict[str, Any]], None]


class MethodDispatcher:
    """
    Routes control-plane invocations to the printer.

    Attributes:
        device_id: Edge device identity embedded in every response
        module_id: Edge module identity (logged at startup)
        reported_properties: Last reported properties (copy)
    """

    def __init__(
        self,
        device_id: str,
        module_id: str,
        config_store: PrinterConfigStore,
        printer_service: PrinterService,
        worker: DeviceWorker,
        publisher: EventPublisher,
        encoder: Optional[PrintJobEncoder] = None,
        output_name: str = DEFAULT_OUTPUT_NAME,
        operation_timeout: float = 30.0
    ):
        self.device_id = device_id
        self.module_id = module_id
        self._config_store = config_store
        self._printer_service = printer_service
        self._worker = worker
        self._publisher = publisher
        self._encoder = encoder or PrintJobEncoder()
        self._output_name = output_name
        self._operation_timeout = operation_timeout

        # Guards the store update, the reported dict and listener calls as one step
        self._reported_lock = threading.Lock()
        self._reported: Dict[str, Any] = {
            PRINTER_PATH_PROPERTY: config_store.snapshot().printer_path
        }
        self._reported_listeners: List[ReportedListener] = []

        self._handlers: Dict[str, Callable[[bytes], MethodResponse]] = {
            PRINT_METHOD: self.handle_print,
            STATUS_METHOD: self.handle_status,
        }

    @property
    def method_names(self) -> Tuple[str, ...]:
        return tuple(self._handlers)

    @property
    def reported_properties(self) -> Dict[str, Any]:
        with self._reported_lock:
            return dict(self._reported)

    def add_reported_listener(self, listener: ReportedListener) -> None:
        """Call ``listener`` with the reported properties after every applied patch."""
        with self._reported_lock:
            self._reported_listeners.append(listener)

    def has_method(self, method_name: str) -> bool:
        return method_name in self._handlers

    def invoke(self, method_name: str, payload: bytes) -> MethodResponse:
        """
        Run the handler registered for ``method_name``.

        Raises:
            KeyError: If no handler is registered under ``method_name``
        """
        return self._handlers[method_name](payload)

    # =========================================================================
    # METHOD HANDLERS
    # =========================================================================

    def handle_print(self, payload: bytes) -> MethodResponse:
        """Handle the ``print`` method."""
        logger.info("+++++++++++++++++++++")

        config = self._config_store.snapshot()
        response = PrintResponse(device_id=self.device_id)
        code = 200

        try:
            request = PrintJobRequest.from_payload(payload)
            logger.info(f"Print method called with message '{payload.decode('utf-8', errors='replace')}'")

            job = self._encoder.encode(request.name)
            future = self._worker.submit(self._printer_service.run_print_job, config, job)
            self._wait(future)

        except Exception as e:
            logger.error(f"Exception '{e}' while processing print method call.")
            code = 500
            response.status = f"Failed to print message ({e})"

        return self._respond("Print", response.to_dict(), code)

    def handle_status(self, payload: bytes) -> MethodResponse:
        """Handle the ``status`` method. The payload is ignored."""
        logger.info("=====================")

        config = self._config_store.snapshot()
        response = StatusResponse(device_id=self.device_id)
        code = 200

        try:
            future = self._worker.submit(self._printer_service.run_status_query, config)
            status = self._wait(future)

            response.status = status.message
            response.paper_collected = status.paper_collected
            response.roll_missing = status.roll_missing

        except Exception as e:
            logger.error(f"Exception '{e}' while processing status method call.")
            code = 500
            response.status = f"Failed to read status ({e})"

        return self._respond("Status", response.to_dict(), code)

    # =========================================================================
    # DESIRED PROPERTIES
    # =========================================================================

    def handle_desired_properties(self, desired: Mapping[str, Any]) -> bool:
        """
        Apply a desired-property patch and update the reported properties.

        A missing or empty ``printerPath`` resets the path to the default.
        The reported value is always the path in effect afterwards; concurrent
        patches are applied and reported one at a time, and reported
        listeners see them in that same order.

        Returns:
            True if applied, False if rejected (previous value kept)
        """
        requested = desired.get(PRINTER_PATH_PROPERTY)

        with self._reported_lock:
            try:
                effective = self._config_store.apply_device_path(requested)
            except ConfigurationError as e:
                logger.error(f"Desired property update failed: {e}")
                return False

            self._reported[PRINTER_PATH_PROPERTY] = effective
            reported = dict(self._reported)

            if not isinstance(requested, str) or not requested.strip():
                logger.info(f"No {PRINTER_PATH_PROPERTY} requested, using default '{effective}'")
            logger.info(f"Reported property {PRINTER_PATH_PROPERTY}='{effective}'")

            for listener in self._reported_listeners:
                try:
                    listener(reported)
                except Exception as e:
                    logger.error(f"Exception '{e}' while reporting properties {reported}")

        return True

    # =========================================================================
    # HELPERS
    # =========================================================================

    def _wait(self, future: Future) -> Any:
        """Wait for a device operation, bounded by operation_timeout."""
        try:
            return future.result(timeout=self._operation_timeout)
        except FutureTimeoutError:
            future.cancel()
            raise PrinterAgentError(
                f"Printer operation timed out after {self._operation_timeout:.1f}s"
            )

    def _respond(self, kind: str, body: Dict[str, Any], code: int) -> MethodResponse:
        method_response = MethodResponse.from_body(body, code)

        publish_event(self._publisher, self._output_name, method_response.payload)

        logger.info(
            f"{kind} method response '{method_response.payload.decode('utf-8')}' returned "
            f"with code {code}."
        )
        return method_response
