"""Find the cell a student's attendance for an event belongs in.

The worksheet is human-maintained, so nothing about it is trusted beyond
a few conventions (see :class:`~attendance_app.config.SheetLayout`):

* the event column is whichever header cell first *contains* the event id,
  scanning the header block top-to-bottom, left-to-right;
* the student row is the first roster row whose document column equals the
  document id once both sides are trimmed.

When the event has no column yet one is claimed by writing the event id
into the marker row of the first free column.  Claims are serialised per
spreadsheet inside this process; two processes claiming the same new
event at once can still end up with two columns.
"""

from __future__ import annotations

import logging
import threading
from collections import defaultdict
from typing import Dict, Optional

from ..config import SheetLayout
from ..models import StudentLocation
from .grid import SheetGrid, a1_cell, column_letter
from .sheets_client import SheetClient

log = logging.getLogger(__name__)

_claim_locks: Dict[str, threading.Lock] = defaultdict(threading.Lock)
_claim_locks_guard = threading.Lock()


def _claim_lock(sheet_id: str) -> threading.Lock:
    with _claim_locks_guard:
        return _claim_locks[sheet_id]


class Locator:
    def __init__(self, client: SheetClient, worksheet_name: str, layout: Optional[SheetLayout] = None):
        self.client = client
        self.worksheet_name = worksheet_name
        self.layout = layout or SheetLayout()

    def read_grid(self, sheet_id: str) -> SheetGrid:
        """One bulk read of the whole worksheet."""

        values = self.client.read_range(sheet_id, self.worksheet_name)
        grid = SheetGrid.from_values(values)
        log.debug(
            "Worksheet %s of %s has %d rows x %d columns",
            self.worksheet_name,
            sheet_id,
            grid.row_count,
            grid.column_count,
        )
        return grid

    def find_event_column(self, grid: SheetGrid, event_id: str) -> Optional[int]:
        hit = grid.find_header_containing(event_id, self.layout.header_scan_rows)
        if hit is None:
            return None
        row, column = hit
        log.debug("Event %s found at %s", event_id, a1_cell(row, column))
        return column

    def find_student_row(self, grid: SheetGrid, document_id: str) -> Optional[int]:
        row = grid.find_row_with_value(
            self.layout.document_column, document_id, self.layout.data_start_row
        )
        if row is None:
            log.debug("Document %s not present in roster column", document_id)
        else:
            log.debug("Document %s found at row %d", document_id, row)
        return row

    def roster_row(self, sheet_id: str, document_id: str) -> Optional[int]:
        """Row of *document_id* in this worksheet, without touching the header."""

        return self.find_student_row(self.read_grid(sheet_id), document_id)

    def claim_event_column(self, sheet_id: str, event_id: str) -> int:
        """Return the column for *event_id*, writing a new marker if needed.

        The worksheet is re-read under the per-spreadsheet lock so a claim
        made by another request of this process is reused instead of
        duplicated.
        """

        layout = self.layout
        with _claim_lock(sheet_id):
            grid = self.read_grid(sheet_id)
            column = self.find_event_column(grid, event_id)
            if column is not None:
                return column

            # new columns must fall inside the band the total counts
            column = grid.first_blank_column(
                max(layout.first_event_column, layout.attendance_first_column),
                layout.marker_row,
                max(layout.marker_row, layout.date_row),
                skip=(layout.total_column,),
            )
            cell = a1_cell(layout.marker_row, column, self.worksheet_name)
            self.client.write_range(sheet_id, cell, [[event_id]])
            log.info(
                "Allocated column %s for event %s",
                column_letter(column),
                event_id,
                extra={"sheet_id": sheet_id},
            )
            return column

    def locate(
        self,
        document_id: str,
        event_id: str,
        sheet_id: str,
        group: str = "",
    ) -> Optional[StudentLocation]:
        """Resolve the (row, column) for a student and event in one worksheet.

        Returns ``None`` when the student is not on this roster.  Transport
        failures propagate as ``SheetsDatastoreError``.  Nothing is written
        unless the student is present.
        """

        log.debug(
            "Locating document %s for event %s in %s (%s)", document_id, event_id, sheet_id, group
        )
        grid = self.read_grid(sheet_id)

        row = self.find_student_row(grid, document_id)
        if row is None:
            return None

        column = self.find_event_column(grid, event_id)
        if column is None:
            column = self.claim_event_column(sheet_id, event_id)

        return StudentLocation(sheet_id=sheet_id, row=row, column=column, group=group)
