"""Attendance registration: relational record first, spreadsheet mirror second."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Optional, Tuple

import pytz

from ..exceptions import DuplicateAttendanceError, EventNotFoundError, StudentNotFoundError
from ..integrations.attendance_store import AttendanceStore
from ..models import AttendanceRecord, AttendanceResult
from ..utils.side_effects import BACKGROUND, NonCriticalTask, dispatch

log = logging.getLogger(__name__)

Mirror = Callable[[AttendanceRecord], Any]


def format_event_date(tz_name: str = "America/Bogota", now: Optional[datetime] = None) -> str:
    """Day/month/year without padding (``1/1/2025``), as the sheets expect."""

    try:
        tz = pytz.timezone(tz_name)
    except pytz.UnknownTimeZoneError:
        log.warning("Invalid timezone '%s'; defaulting to UTC", tz_name)
        tz = pytz.UTC
    current = now.astimezone(tz) if now else datetime.now(tz)
    return f"{current.day}/{current.month}/{current.year}"


class RegistrationService:
    def __init__(
        self,
        store: AttendanceStore,
        mirror: Mirror,
        *,
        tz_name: str = "America/Bogota",
        mirror_mode: str = BACKGROUND,
    ):
        self.store = store
        self.mirror = mirror
        self.tz_name = tz_name
        self.mirror_mode = mirror_mode

    def register_attendance(
        self, event_id: str, document_id: str, verified_by: Optional[str] = None
    ) -> Tuple[AttendanceResult, NonCriticalTask]:
        """Record attendance and queue the spreadsheet mirror.

        Raises ``EventNotFoundError``, ``StudentNotFoundError`` or
        ``DuplicateAttendanceError``; anything the store raises propagates.
        The mirror never affects the outcome.
        """

        event = self.store.get_event(event_id)
        if not event:
            raise EventNotFoundError(f"Event {event_id} not found")

        student = self.store.get_student_by_document(document_id)
        if not student:
            raise StudentNotFoundError(f"Student with document {document_id} not found")

        if self.store.get_attendance(event_id, student["id"]):
            raise DuplicateAttendanceError(
                f"Attendance already registered for {document_id} at event {event_id}"
            )

        row = self.store.insert_attendance(event_id, student["id"], verified_by)
        log.info(
            "Attendance stored",
            extra={"event_id": event_id, "student_id": student["id"], "verified_by": verified_by},
        )

        record = AttendanceRecord(
            document_id=str(student.get("document_id") or document_id),
            event_id=str(event.get("id") or event_id),
            event_title=event.get("title") or "",
            event_date=format_event_date(self.tz_name),
        )
        task = dispatch(
            f"sheets-mirror:{record.event_id}:{record.document_id}",
            self.mirror,
            record,
            mode=self.mirror_mode,
        )
        result = AttendanceResult(attendance_id=row.get("id"), event=event, student=student)
        return result, task
