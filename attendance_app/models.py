"""Plain data carriers passed between the routes, services and sheet code."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

from .integrations.grid import a1_cell


@dataclass(frozen=True)
class AttendanceRecord:
    """What the spreadsheet mirror needs to know about one registration.

    ``event_date`` is already formatted for display (``1/1/2025``).
    """

    document_id: str
    event_id: str
    event_title: str = ""
    event_date: str = ""


@dataclass(frozen=True)
class StudentLocation:
    """Cell where a student's attendance for one event is written (1-based)."""

    sheet_id: str
    row: int
    column: int
    group: str

    @property
    def a1(self) -> str:
        return a1_cell(self.row, self.column)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["cell"] = self.a1
        return data


@dataclass(frozen=True)
class ReconcileResult:
    group: str
    location: StudentLocation
    message: str = ""
    duplicate_groups: tuple = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": True,
            "group": self.group,
            "message": self.message,
            "location": self.location.to_dict(),
        }


@dataclass(frozen=True)
class AttendanceResult:
    """Outcome of a registration as reported back to the UI."""

    attendance_id: Optional[Any]
    event: Dict[str, Any]
    student: Dict[str, Any]

    def student_payload(self) -> Dict[str, Any]:
        return {
            "full_name": self.student.get("full_name"),
            "document_id": self.student.get("document_id"),
            "code": self.student.get("code"),
        }
