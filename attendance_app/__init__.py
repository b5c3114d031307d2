"""Application factory and blueprint registration."""

import importlib
import inspect
import logging
import pkgutil

from flask import Blueprint, Flask, jsonify

from .config import Config, SheetsSettings
from .exceptions import ConfigurationError
from .utils.logger import init_logging


def create_app(config_overrides=None) -> Flask:
    """Create and configure the Flask application."""

    app = Flask(__name__)
    app.config.from_object(Config)
    if config_overrides:
        app.config.update(config_overrides)

    app.config.setdefault("TZ", "America/Bogota")
    app.config.setdefault("WORKSHEET_NAME", "ASISTENCIA")
    app.config.setdefault("SHEETS_SYNC_MODE", "background")

    try:
        init_logging(app)
    except Exception:  # pragma: no cover - only hit during catastrophic logging failure
        logging.basicConfig(level=logging.INFO)
        app.logger.exception("init_logging failed; using basic logging fallback")

    # Missing sheet ids only disable the mirror; registrations keep working.
    try:
        SheetsSettings.from_mapping(app.config)
    except ConfigurationError as exc:
        app.logger.error("Spreadsheet mirror is not configured: %s", exc)

    @app.get("/healthz")
    def healthz():
        """Lightweight liveness probe."""

        return "ok", 200

    # Blueprint auto-discovery ---------------------------------------------
    def register_all_blueprints() -> None:
        base_pkg = f"{__name__}.routes"
        pkg = importlib.import_module(base_pkg)

        for modinfo in pkgutil.iter_modules(pkg.__path__):
            name = f"{base_pkg}.{modinfo.name}"
            module = importlib.import_module(name)

            blueprints = [
                obj
                for _, obj in inspect.getmembers(module)
                if isinstance(obj, Blueprint)
            ]
            url_prefix = getattr(module, "URL_PREFIX", None)
            for bp in blueprints:
                prefix = url_prefix or f"/{modinfo.name}"
                app.register_blueprint(bp, url_prefix=prefix)
                app.logger.debug("Registered %s at %s", bp.name, prefix)

    register_all_blueprints()

    # Error handlers ---------------------------------------------------------
    @app.errorhandler(404)
    def _handle_404(error):
        return jsonify({"error": "Not Found"}), 404

    @app.errorhandler(500)
    def _handle_500(error):
        app.logger.exception("500: %s", error)
        return jsonify({"error": "Internal Server Error"}), 500

    return app
