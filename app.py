"""
TUP900 printer agent - Flask application entry point.

This is a slim app factory that:
1. Loads configuration and identity (IOTEDGE_DEVICEID / IOTEDGE_MODULEID)
2. Starts the device worker (single owner of the printer device path)
3. Creates the printer service, event outbox and method dispatcher
4. Connects to the edge hub when running as an IoT Edge module
5. Registers route blueprints and JSON error handlers

ARCHITECTURE:
    Request threads (Flask)
    ├── /methods/print, /methods/status -> MethodDispatcher
    ├── /twin/desired                   -> PrinterConfigStore
    └── /api/events, /health

    Edge hub client threads (EdgeHubBridge)
    ├── direct methods print, status    -> MethodDispatcher
    └── desired property patches        -> MethodDispatcher

    DeviceWorker thread
    └── Runs print/status device operations one at a time

Reconnect is not handled here: if the process dies the container runtime
restarts it.
"""

from __future__ import annotations

import atexit
import functools
import logging
import os
import sys
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv
from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from logging_config import setup_logging, get_logger
from core.device_channel import ChannelFactory, open_device_channel
from models.printer_config import PrinterConfigStore
from modules.job_encoder import NameEncodingPolicy, PrintJobEncoder
from routes import register_blueprints
from services.device_worker import DeviceWorker
from services.edge_hub import EdgeHubBridge, EdgeHubEventPublisher, create_module_client
from services.event_publisher import EventPublisher, OutboxEventPublisher
from services.method_dispatcher import MethodDispatcher
from services.printer_service import PrinterService


# Module logger (configured after setup_logging)
logger = get_logger(__name__)


def _get_base_path() -> Path:
    """
    Get the base path for the application.

    In a frozen bundle: Returns the directory containing the executable
    In development: Returns the directory containing app.py
    """
    if getattr(sys, 'frozen', False):
        return Path(sys.executable).parent
    return Path(__file__).parent


def create_app(
    config_object: str | object = "config.Config",
    channel_factory: Optional[ChannelFactory] = None,
    event_publisher: Optional[EventPublisher] = None,
    hub_client: Optional[Any] = None,
) -> Flask:
    """
    Application factory - creates and configures the agent.

    Args:
        config_object: Import path or object passed to app.config.from_object
        channel_factory: Opens device channels (default: the real device path)
        event_publisher: Event sink (default: edge hub output when connected,
            otherwise a bounded in-memory outbox)
        hub_client: IoTHubModuleClient to bind to (default: created from the
            edge environment when EDGE_HUB_ENABLED is set)

    Returns:
        Configured Flask application with a running device worker

    Raises:
        ValueError: If NAME_ENCODING_POLICY is not a known policy
    """
    env_file = _get_base_path() / '.env'
    if env_file.exists():
        load_dotenv(env_file, override=False)

    app = Flask(__name__)
    app.config.from_object(config_object)

    # Configure logging
    log_level = logging.DEBUG if app.config.get("DEBUG") else logging.INFO
    enable_file_logging = app.config.get("ENVIRONMENT") == "production"

    root_logger = setup_logging(
        log_level=log_level,
        log_dir=Path(app.config["LOG_DIR"]),
        enable_file_logging=enable_file_logging
    )
    app.logger.handlers = root_logger.handlers
    app.logger.setLevel(log_level)

    logger.info(f"Starting TUP900 agent in {app.config.get('ENVIRONMENT')} mode")

    # =========================================================================
    # CORE INITIALIZATION
    # =========================================================================

    device_id = app.config.get("DEVICE_ID", "")
    module_id = app.config.get("MODULE_ID", "")

    policy = NameEncodingPolicy(app.config.get("NAME_ENCODING_POLICY", "replace"))
    encoder = PrintJobEncoder(policy=policy)

    config_store = PrinterConfigStore(default_path=app.config["PRINTER_PATH"])

    if channel_factory is None:
        write_timeout = float(app.config["DEVICE_WRITE_TIMEOUT"])
        channel_factory = functools.partial(open_device_channel, write_timeout=write_timeout)

    printer_service = PrinterService(
        channel_factory=channel_factory,
        status_read_timeout=float(app.config["STATUS_READ_TIMEOUT"]),
        status_response_size=int(app.config["STATUS_RESPONSE_SIZE"]),
    )

    if hub_client is None and app.config.get("EDGE_HUB_ENABLED"):
        hub_client = create_module_client()

    outbox_size = int(app.config["EVENT_OUTBOX_SIZE"])
    if event_publisher is None:
        if hub_client is not None:
            event_publisher = EdgeHubEventPublisher(hub_client, max_events=outbox_size)
        else:
            event_publisher = OutboxEventPublisher(max_events=outbox_size)

    # =========================================================================
    # SERVICES INITIALIZATION
    # =========================================================================

    worker = DeviceWorker()
    worker.start()

    dispatcher = MethodDispatcher(
        device_id=device_id,
        module_id=module_id,
        config_store=config_store,
        printer_service=printer_service,
        worker=worker,
        publisher=event_publisher,
        encoder=encoder,
        output_name=app.config["EVENT_OUTPUT_NAME"],
        operation_timeout=float(app.config["OPERATION_TIMEOUT"]),
    )

    app.config["PRINTER_CONFIG_STORE"] = config_store
    app.config["DEVICE_WORKER"] = worker
    app.config["EVENT_PUBLISHER"] = event_publisher
    app.config["DISPATCHER"] = dispatcher

    hub_bridge = None
    if hub_client is not None:
        hub_bridge = EdgeHubBridge(hub_client, dispatcher)
        hub_bridge.start()
    app.config["EDGE_HUB"] = hub_bridge

    logger.info(f"Module '{device_id}'-'{module_id}' initialized.")
    logger.info(
        f"Printer path '{config_store.snapshot().printer_path}', "
        f"name encoding policy '{policy.value}', events on '{app.config['EVENT_OUTPUT_NAME']}'"
    )

    # =========================================================================
    # CLEANUP REGISTRATION
    # =========================================================================

    def cleanup():
        """Cleanup on application shutdown. Safe to call more than once."""
        atexit.unregister(cleanup)
        if not worker.is_running and not (hub_bridge and hub_bridge.is_running):
            return
        logger.info("Shutting down...")
        if hub_bridge is not None:
            hub_bridge.stop()
        worker.stop()
        logger.info("Shutdown complete")

    atexit.register(cleanup)
    app.extensions["tup900_cleanup"] = cleanup

    # =========================================================================
    # REGISTER BLUEPRINTS
    # =========================================================================

    register_blueprints(app)

    # =========================================================================
    # ERROR HANDLERS
    # =========================================================================

    @app.errorhandler(HTTPException)
    def handle_http_error(e):
        return jsonify({"error": e.name, "description": e.description}), e.code

    @app.errorhandler(Exception)
    def handle_server_error(e):
        logger.error(f"500 error: {e}", exc_info=True)
        return jsonify({"error": "Internal Server Error"}), 500

    logger.info("Application initialized successfully")
    return app


if __name__ == "__main__":
    app = create_app()
    port = int(os.environ.get("PORT", "8080"))
    app.run(host=os.environ.get("HOST", "0.0.0.0"), port=port, debug=False)
