"""
API routes.

Handles:
- /api/events - Recently published events (outbox)
- /health     - Health check endpoint
"""

from flask import Blueprint, current_app, request

from logging_config import get_logger


# Module logger
logger = get_logger(__name__)

api_bp = Blueprint("api", __name__)


@api_bp.route("/api/events", methods=["GET"])
def events():
    """
    Return events from the outbox, oldest first.

    Query parameters:
        output: only events published on this output
        limit: at most this many of the newest events
    """
    publisher = current_app.config.get("EVENT_PUBLISHER")
    if publisher is None or not hasattr(publisher, "recent"):
        return {"error": "Event outbox unavailable", "events": []}, 503

    output_name = request.args.get("output")
    limit = request.args.get("limit", type=int)

    messages = publisher.recent(output_name=output_name, limit=limit)
    return {"events": [m.to_dict() for m in messages]}


@api_bp.route("/health", methods=["GET"])
def health():
    """Health check endpoint with worker status."""
    dispatcher = current_app.config.get("DISPATCHER")
    worker = current_app.config.get("DEVICE_WORKER")

    health_status = {
        "status": "ok",
        "environment": current_app.config.get("ENVIRONMENT", "unknown"),
        "deviceId": dispatcher.device_id if dispatcher else "",
        "moduleId": dispatcher.module_id if dispatcher else "",
        "checks": {}
    }

    if worker and worker.is_running:
        health_status["checks"]["device_worker"] = "running"
        health_status["checks"]["pending_operations"] = worker.pending
    else:
        health_status["checks"]["device_worker"] = "not_running"
        health_status["status"] = "degraded"

    hub = current_app.config.get("EDGE_HUB")
    if hub is None:
        health_status["checks"]["edge_hub"] = "disabled"
    else:
        health_status["checks"]["edge_hub"] = "running" if hub.is_running else "stopped"

    if dispatcher:
        health_status["checks"]["printer_path"] = dispatcher.reported_properties.get("printerPath")

    status_code = 200 if health_status["status"] == "ok" else 503
    return health_status, status_code
