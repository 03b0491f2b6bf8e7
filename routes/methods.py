"""
Direct method routes.

Handles:
- POST /methods/<method_name> - invoke a registered method

The raw request body is the method payload and the reply body is the
method's JSON response with the method's own status code (200/500).
"""

from flask import Blueprint, Response, current_app, jsonify, request

from logging_config import get_logger


# Module logger
logger = get_logger(__name__)

methods_bp = Blueprint("methods", __name__)


@methods_bp.route("/methods/<method_name>", methods=["POST"])
def invoke_method(method_name: str):
    """Invoke ``method_name`` with the request body as payload."""
    dispatcher = current_app.config["DISPATCHER"]

    if not dispatcher.has_method(method_name):
        logger.warning(f"Unknown method '{method_name}' invoked")
        return jsonify({
            "status": f"Method '{method_name}' is not implemented.",
            "methods": list(dispatcher.method_names),
        }), 501

    method_response = dispatcher.invoke(method_name, request.get_data())

    return Response(
        method_response.payload,
        status=method_response.status,
        mimetype="application/json",
    )
