"""Write an attendance mark and refresh the student's running total."""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from ..config import SheetLayout
from ..exceptions import SheetsDatastoreError
from ..models import AttendanceRecord, StudentLocation
from .grid import a1_cell, a1_range
from .sheets_client import SheetClient

log = logging.getLogger(__name__)

PRESENT_MARK = "1"


def count_marks(values: Iterable[object]) -> int:
    return sum(1 for v in values if v is not None and str(v) == PRESENT_MARK)


class AttendanceWriter:
    """Three separate remote writes per mark: cell, date stamp, total.

    The store offers no multi-cell transaction, so a failure part-way
    leaves the earlier writes in place.  The total is always recounted
    from the sheet, never incremented, which keeps repeated calls for the
    same location from inflating it.
    """

    def __init__(self, client: SheetClient, worksheet_name: str, layout: Optional[SheetLayout] = None):
        self.client = client
        self.worksheet_name = worksheet_name
        self.layout = layout or SheetLayout()

    def _cell(self, row: int, column: int) -> str:
        return a1_cell(row, column, self.worksheet_name)

    def recompute_total(self, location: StudentLocation) -> int:
        layout = self.layout
        band = a1_range(
            location.row,
            layout.attendance_first_column,
            location.row,
            layout.attendance_last_column,
            self.worksheet_name,
        )
        values = self.client.read_range(location.sheet_id, band)
        total = count_marks(values[0] if values else [])
        self.client.write_range(
            location.sheet_id, self._cell(location.row, layout.total_column), [[total]]
        )
        log.debug("Total for row %d recomputed from %s: %d", location.row, band, total)
        return total

    def mark_attendance(self, location: StudentLocation, record: AttendanceRecord) -> bool:
        """Mark *location* present and stamp the event date.

        Returns ``False`` (after logging) when any remote step fails; the
        remaining steps are skipped.
        """

        layout = self.layout
        mark_cell = self._cell(location.row, location.column)
        date_cell = self._cell(layout.date_row, location.column)
        step = "mark"
        try:
            self.client.write_range(location.sheet_id, mark_cell, [[PRESENT_MARK]])
            log.debug("Attendance marked at %s", mark_cell)

            step = "date"
            self.client.write_range(location.sheet_id, date_cell, [[record.event_date]])
            log.debug("Event date %s stamped at %s", record.event_date, date_cell)

            step = "total"
            total = self.recompute_total(location)
        except SheetsDatastoreError:
            log.warning(
                "Attendance write stopped at step '%s'; earlier steps are kept",
                step,
                exc_info=True,
                extra={"group": location.group, "sheet_id": location.sheet_id, "cell": mark_cell},
            )
            return False

        log.info(
            "Attendance recorded in %s at %s (total %d)",
            location.group or location.sheet_id,
            location.a1,
            total,
        )
        return True
