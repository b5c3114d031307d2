"""Mirror one attendance registration into the group worksheets.

Groups are disjoint rosters, each backed by its own spreadsheet.  They are
tried in configured order and the first group that both lists the student
and accepts the write wins; later groups are not read.  With
``scan_all_groups`` enabled the later rosters are still searched (read
only) so duplicate enrollment shows up in the logs.
"""

from __future__ import annotations

import logging
from typing import Any, List, Mapping, Optional

from ..config import SheetsSettings
from ..exceptions import SheetsDatastoreError, StudentNotFoundAnywhereError
from ..models import AttendanceRecord, ReconcileResult
from .attendance_writer import AttendanceWriter
from .locator import Locator
from .sheets_client import SheetClient

log = logging.getLogger(__name__)


class Reconciler:
    def __init__(
        self,
        client: SheetClient,
        settings: SheetsSettings,
        locator: Optional[Locator] = None,
        writer: Optional[AttendanceWriter] = None,
    ):
        self.client = client
        self.settings = settings
        self.locator = locator or Locator(client, settings.worksheet_name, settings.layout)
        self.writer = writer or AttendanceWriter(client, settings.worksheet_name, settings.layout)

    def reconcile(self, record: AttendanceRecord) -> ReconcileResult:
        """Write *record* into the first group that lists the student.

        Raises ``StudentNotFoundAnywhereError`` when every group was read
        and none lists the student, and ``SheetsDatastoreError`` when the
        student could not be placed because a group was unreachable or a
        write failed.
        """

        log.info(
            "Reconciling attendance",
            extra={"document_id": record.document_id, "event_id": record.event_id},
        )
        errors: List[str] = []
        result: Optional[ReconcileResult] = None
        duplicates: List[str] = []

        for group, sheet_id in self.settings.groups:
            if result is not None:
                if self._listed_in(group, sheet_id, record.document_id):
                    duplicates.append(group)
                    log.warning(
                        "Document %s is also enrolled in %s; attendance kept in %s",
                        record.document_id,
                        group,
                        result.group,
                    )
                continue

            log.debug("Searching %s (%s)", group, sheet_id)
            try:
                location = self.locator.locate(
                    record.document_id, record.event_id, sheet_id, group=group
                )
            except SheetsDatastoreError as exc:
                log.error("Could not search %s: %s", group, exc)
                errors.append(f"{group}: {exc}")
                continue

            if location is None:
                log.info("Document %s not found in %s", record.document_id, group)
                continue

            if not self.writer.mark_attendance(location, record):
                errors.append(f"{group}: write failed at {location.a1}")
                continue

            result = ReconcileResult(
                group=group,
                location=location,
                message=f"Attendance recorded in {group}",
            )
            if not self.settings.scan_all_groups:
                break

        if result is not None:
            if duplicates:
                result = ReconcileResult(
                    group=result.group,
                    location=result.location,
                    message=result.message,
                    duplicate_groups=tuple(duplicates),
                )
            log.info("Attendance mirrored to %s at %s", result.group, result.location.a1)
            return result

        if errors:
            raise SheetsDatastoreError("; ".join(errors))

        log.warning("Document %s not found in any group", record.document_id)
        raise StudentNotFoundAnywhereError(record.document_id, self.settings.group_names)

    def _listed_in(self, group: str, sheet_id: str, document_id: str) -> bool:
        try:
            return self.locator.roster_row(sheet_id, document_id) is not None
        except SheetsDatastoreError as exc:
            log.warning("Duplicate check against %s skipped: %s", group, exc)
            return False


def build_reconciler(cfg: Mapping[str, Any], client: Optional[SheetClient] = None) -> Reconciler:
    """Create a reconciler from a Flask config mapping.

    Raises ``ConfigurationError`` for missing group ids or credentials.
    """

    settings = SheetsSettings.from_mapping(cfg)
    return Reconciler(client or SheetClient.from_config(cfg), settings)
