# attendance_app/routes/diagnostics.py
from flask import Blueprint, current_app, jsonify

from ..extensions import get_sheet_client
from ..integrations.diagnostics import check_sheets

URL_PREFIX = "/api"
bp = Blueprint("diagnostics", __name__)


@bp.get("/test-sheets")
def test_sheets():
    app = current_app
    app.logger.info("Sheet connectivity check requested")
    try:
        report = check_sheets(app.config, get_sheet_client(app))
    except Exception as exc:
        app.logger.exception("Sheet connectivity check failed")
        return jsonify({"error": str(exc)}), 500
    return jsonify(report)
