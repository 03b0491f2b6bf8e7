"""
Flask route blueprints for the TUP900 printer agent.

The HTTP surface stands in for the control-plane connection:
- methods: direct method invocations (print, status)
- twin: desired/reported properties (printerPath)
- api: health check and the event outbox

Each blueprint is registered with the Flask app in create_app().
"""

from .methods import methods_bp
from .twin import twin_bp
from .api import api_bp

__all__ = [
    "methods_bp",
    "twin_bp",
    "api_bp",
]


def register_blueprints(app):
    """
    Register all blueprints with the Flask app.

    Args:
        app: Flask application instance
    """
    app.register_blueprint(methods_bp)
    app.register_blueprint(twin_bp)
    app.register_blueprint(api_bp)
