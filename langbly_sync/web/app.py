"""Flask application configuration and blueprint registration."""

from __future__ import annotations

from typing import Any, Dict, Optional

from flask import Flask, jsonify

from langbly_sync.exceptions import TranslationError
from langbly_sync.logger import get_logger

from .routes.translation import translation_bp

logger = get_logger(__name__)


def build_app(app_config: Optional[Dict[str, Any]] = None, manager_factory=None) -> Flask:
    """
    Create and configure the Flask application.

    Args:
        app_config: Application config used by jobs (config.json is read per request when None).
        manager_factory: Optional replacement for TranslationManager.
    """
    app = Flask(__name__)

    # Ensure JSON responses keep Unicode data.
    app.config["JSON_AS_ASCII"] = False
    app.config["LANGBLY_CONFIG"] = app_config
    app.config["LANGBLY_MANAGER_FACTORY"] = manager_factory

    register_blueprints(app)
    register_default_routes(app)

    return app


def register_blueprints(app: Flask) -> None:
    """Register Flask blueprints."""
    app.register_blueprint(translation_bp, url_prefix="/api")


def register_default_routes(app: Flask) -> None:
    """Register health route and JSON error handlers."""

    @app.get("/health")
    def health_check():
        logger.debug("Health check requested")
        return jsonify({"status": "ok"})

    @app.errorhandler(TranslationError)
    def translation_error(e: TranslationError):
        logger.error("Translation error: %s", e)
        return jsonify({"error": str(e), "code": e.code, "details": e.details}), 400

    @app.errorhandler(404)
    def page_not_found(e):
        return jsonify({"error": "Not found"}), 404

    @app.errorhandler(500)
    def internal_error(e):
        logger.exception("Internal server error: %s", e)
        return jsonify({"error": "Internal server error"}), 500
