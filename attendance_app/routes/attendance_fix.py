# attendance_app/routes/attendance_fix.py
from flask import Blueprint, current_app, jsonify, request

from ..exceptions import StudentNotFoundAnywhereError
from ..extensions import get_reconciler
from ..models import AttendanceRecord
from ..services.registration import format_event_date

URL_PREFIX = "/api"
bp = Blueprint("attendance_fix", __name__)


@bp.post("/attendance-fix")
def write_direct():
    """Write straight to the group spreadsheets, bypassing the database."""

    app = current_app
    payload = request.get_json(silent=True) or {}
    event_id = str(payload.get("eventId") or "").strip()
    document_id = str(payload.get("documentId") or "").strip()
    student_name = payload.get("studentName") or "estudiante"

    if not event_id or not document_id:
        return jsonify({"error": "eventId y documentId son obligatorios"}), 400

    app.logger.info(
        "Direct sheet write requested",
        extra={"event_id": event_id, "document_id": document_id},
    )
    record = AttendanceRecord(
        document_id=document_id,
        event_id=event_id,
        event_title=payload.get("eventTitle") or "",
        event_date=format_event_date(app.config.get("TZ", "America/Bogota")),
    )
    try:
        result = get_reconciler(app).reconcile(record)
    except StudentNotFoundAnywhereError:
        return (
            jsonify({"error": f"Estudiante con documento {document_id} no encontrado en ninguna hoja"}),
            404,
        )
    except Exception as exc:
        app.logger.exception("Direct sheet write failed", extra={"event_id": event_id})
        return jsonify({"error": str(exc) or "Error interno del servidor"}), 500

    return jsonify(
        {
            "success": True,
            "message": f"Asistencia registrada para {student_name} en Google Sheets ({result.group})",
            "location": f"{result.group}, Celda {result.location.a1}",
        }
    )
