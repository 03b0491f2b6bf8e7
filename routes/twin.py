"""
Desired/reported property routes.

Handles:
- PATCH /twin/desired  - apply a desired-property patch, reply with reported
- GET   /twin/reported - current reported properties
"""

from flask import Blueprint, current_app, jsonify, request

from logging_config import get_logger


# Module logger
logger = get_logger(__name__)

twin_bp = Blueprint("twin", __name__)


@twin_bp.route("/twin/desired", methods=["PATCH", "PUT"])
def update_desired():
    """
    Apply desired properties.

    Replies 200 with the reported properties when applied, or 400 with the
    unchanged reported properties when the patch was rejected.
    """
    dispatcher = current_app.config["DISPATCHER"]

    desired = request.get_json(silent=True)
    if not isinstance(desired, dict):
        logger.error("Desired property update ignored: body is not a JSON object")
        return jsonify({
            "error": "Desired properties must be a JSON object",
            "reported": dispatcher.reported_properties,
        }), 400

    logger.info(f"Desired property update received: {desired}")

    if not dispatcher.handle_desired_properties(desired):
        return jsonify({
            "error": "Desired properties rejected; previous configuration kept",
            "reported": dispatcher.reported_properties,
        }), 400

    return jsonify(dispatcher.reported_properties)


@twin_bp.route("/twin/reported", methods=["GET"])
def get_reported():
    """Return the reported properties."""
    dispatcher = current_app.config["DISPATCHER"]
    return jsonify(dispatcher.reported_properties)
