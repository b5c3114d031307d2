# attendance_app/routes/attendance.py
from flask import Blueprint, current_app, jsonify, request

from ..exceptions import DuplicateAttendanceError, EventNotFoundError, StudentNotFoundError
from ..extensions import get_registration_service

URL_PREFIX = "/api"
bp = Blueprint("attendance", __name__)


@bp.post("/attendance")
def register():
    """Self-registration from the public attendance page."""

    app = current_app
    payload = request.get_json(silent=True) or {}
    event_id = str(payload.get("eventId") or "").strip()
    document_id = str(payload.get("documentId") or "").strip()
    verified_by = payload.get("verifiedBy") or None

    if not event_id or not document_id:
        return jsonify({"error": "eventId y documentId son obligatorios"}), 400

    app.logger.debug(
        "Attendance registration requested",
        extra={"event_id": event_id, "document_id": document_id, "verified_by": verified_by},
    )
    try:
        result, _ = get_registration_service(app).register_attendance(
            event_id, document_id, verified_by
        )
    except EventNotFoundError:
        return jsonify({"error": "Evento no encontrado"}), 404
    except StudentNotFoundError:
        return jsonify({"error": "Estudiante no encontrado"}), 404
    except DuplicateAttendanceError:
        return jsonify({"error": "Ya registraste tu asistencia para este evento"}), 400
    except Exception as exc:
        app.logger.exception(
            "Attendance registration failed", extra={"event_id": event_id, "document_id": document_id}
        )
        return jsonify({"error": str(exc)}), 500

    return jsonify(
        {
            "message": "Asistencia registrada correctamente",
            "student": result.student_payload(),
        }
    )
