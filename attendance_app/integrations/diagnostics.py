"""Connectivity report for the group spreadsheets.

Used by ``GET /api/test-sheets`` and the smoke-test script when a deploy
cannot write attendance: shows which credentials are present, whether
each group spreadsheet opens, and the first few roster rows so the
column layout can be checked by eye.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping

from ..config import SheetLayout
from ..exceptions import SheetsDatastoreError
from .grid import SheetGrid, a1_range
from .sheets_client import SheetClient

log = logging.getLogger(__name__)

SAMPLE_SIZE = 5
ROSTER_FIELDS = ("code", "program", "name", "document")


def roster_sample(rows: List[List[str]], limit: int = SAMPLE_SIZE) -> List[Dict[str, str]]:
    sample = []
    for row in rows[:limit]:
        padded = list(row) + [""] * (len(ROSTER_FIELDS) - len(row))
        sample.append(dict(zip(ROSTER_FIELDS, padded)))
    return sample


def dump_worksheet(client: SheetClient, sheet_id: str, worksheet_name: str, layout: SheetLayout) -> Dict[str, Any]:
    """Header block plus a roster sample, the way an operator would eyeball it."""

    grid = SheetGrid.from_values(client.read_range(sheet_id, worksheet_name))
    header = [list(grid.row(r)) for r in range(1, min(layout.header_scan_rows, grid.row_count) + 1)]
    roster = [
        list(grid.row(r))
        for r in range(layout.data_start_row, min(layout.data_start_row + SAMPLE_SIZE, grid.row_count + 1))
    ]
    log.debug("Dumped %s: %d header rows, %d roster rows", sheet_id, len(header), len(roster))
    return {"rows": grid.row_count, "header": header, "roster": roster_sample(roster)}


def check_sheets(cfg: Mapping[str, Any], client: SheetClient) -> Dict[str, Any]:
    """Probe every configured group.  Per-group failures are reported, not raised."""

    layout = SheetLayout.from_mapping(cfg)
    worksheet = cfg.get("WORKSHEET_NAME") or "ASISTENCIA"
    groups = list(cfg.get("SHEET_GROUPS") or ("GRUPO1", "GRUPO2"))

    report: Dict[str, Any] = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "auth": {
            "email": cfg.get("GOOGLE_CLIENT_EMAIL") or client.client_email,
            "privateKeyConfigured": bool(
                cfg.get("GOOGLE_PRIVATE_KEY") or cfg.get("GOOGLE_SERVICE_ACCOUNT_JSON")
            ),
        },
        "sheets": {},
        "students": [],
    }

    for group in groups:
        sheet_id = (cfg.get(f"GOOGLE_SHEET_ID_{group}") or "").strip()
        if not sheet_id:
            report["sheets"][group] = {"access": False, "error": "spreadsheet id not configured"}
            continue
        try:
            meta = client.describe(sheet_id)
        except SheetsDatastoreError as exc:
            log.error("Access check failed for %s: %s", group, exc)
            report["sheets"][group] = {"access": False, "error": str(exc)}
            continue
        report["sheets"][group] = {"access": True, **meta}

        sample_range = a1_range(
            layout.data_start_row, 1, layout.data_start_row + 2 * SAMPLE_SIZE, layout.document_column, worksheet
        )
        try:
            rows = client.read_range(sheet_id, sample_range)
        except SheetsDatastoreError as exc:
            log.error("Roster sample failed for %s: %s", group, exc)
            report["sheets"][group]["sampleError"] = str(exc)
            continue
        report["students"].append({"group": group, "sample": roster_sample(rows)})

    return report
