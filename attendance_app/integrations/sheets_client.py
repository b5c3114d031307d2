"""Thin authenticated wrapper around the Google Sheets values API.

Only two primitives are exposed to the rest of the application,
``read_range`` and ``write_range``, both addressed by spreadsheet id plus
an A1 range that includes the worksheet name (``ASISTENCIA!G9:T9``).
Every transport failure (authentication, unknown spreadsheet, quota,
network) surfaces as :class:`SheetsDatastoreError`; nothing is retried
here.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Dict, List, Mapping, Optional

import gspread
import requests
from google.auth.exceptions import GoogleAuthError
from google.oauth2.service_account import Credentials

from ..config import credentials_info
from ..exceptions import SheetsDatastoreError

log = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]

_TRANSPORT_ERRORS = (
    gspread.exceptions.GSpreadException,
    GoogleAuthError,
    requests.RequestException,
)

Grid = List[List[str]]


class SheetClient:
    """Read/write access to spreadsheets shared with one service account.

    The gspread client is authorised lazily on first use and then reused
    for the lifetime of the process.
    """

    def __init__(self, service_account_info: Mapping[str, Any]):
        self._info = dict(service_account_info)
        self._client: Optional[gspread.Client] = None
        self._spreadsheets: Dict[str, gspread.Spreadsheet] = {}
        self._lock = threading.Lock()

    @classmethod
    def from_config(cls, cfg: Mapping[str, Any]) -> "SheetClient":
        return cls(credentials_info(cfg))

    @property
    def client_email(self) -> str:
        return self._info.get("client_email", "")

    def _authorised_client(self) -> gspread.Client:
        with self._lock:
            if self._client is not None:
                return self._client
            log.debug("Initialising Google Sheets client for %s", self.client_email)
            try:
                creds = Credentials.from_service_account_info(self._info, scopes=SCOPES)
                self._client = gspread.authorize(creds)
            except (ValueError, KeyError) as exc:
                log.exception("Failed to build Google credentials from service account info.")
                raise SheetsDatastoreError(f"Invalid service account credentials: {exc}") from exc
            except _TRANSPORT_ERRORS as exc:
                log.exception("Failed to authorise Google Sheets client.")
                raise SheetsDatastoreError(f"Google Sheets authorisation failed: {exc}") from exc
            log.debug("Google Sheets client initialised successfully.")
            return self._client

    def _spreadsheet(self, sheet_id: str) -> gspread.Spreadsheet:
        cached = self._spreadsheets.get(sheet_id)
        if cached is not None:
            return cached
        client = self._authorised_client()
        try:
            spreadsheet = client.open_by_key(sheet_id)
        except _TRANSPORT_ERRORS as exc:
            log.error("Failed to open spreadsheet", extra={"sheet_id": sheet_id})
            raise SheetsDatastoreError(f"Could not open spreadsheet {sheet_id}: {exc}") from exc
        self._spreadsheets[sheet_id] = spreadsheet
        return spreadsheet

    def read_range(self, sheet_id: str, range_spec: str) -> Grid:
        """Return the values of *range_spec* as a list of rows of strings.

        Trailing empty cells and rows are omitted by the API, so rows may be
        ragged and an empty range yields ``[]``.
        """

        spreadsheet = self._spreadsheet(sheet_id)
        log.debug("Reading %s from %s", range_spec, sheet_id)
        try:
            response = spreadsheet.values_get(range_spec)
        except _TRANSPORT_ERRORS as exc:
            raise SheetsDatastoreError(f"Read of {range_spec} failed: {exc}") from exc
        values = response.get("values", [])
        return [["" if cell is None else str(cell) for cell in row] for row in values]

    def write_range(self, sheet_id: str, range_spec: str, values: List[List[Any]]) -> None:
        spreadsheet = self._spreadsheet(sheet_id)
        log.debug("Writing %s to %s", range_spec, sheet_id)
        try:
            spreadsheet.values_update(
                range_spec,
                params={"valueInputOption": "USER_ENTERED"},
                body={"values": values},
            )
        except _TRANSPORT_ERRORS as exc:
            raise SheetsDatastoreError(f"Write of {range_spec} failed: {exc}") from exc

    def describe(self, sheet_id: str) -> Dict[str, Any]:
        """Return the spreadsheet title and the titles of its worksheets."""

        spreadsheet = self._spreadsheet(sheet_id)
        try:
            titles = [ws.title for ws in spreadsheet.worksheets()]
        except _TRANSPORT_ERRORS as exc:
            raise SheetsDatastoreError(f"Could not list worksheets of {sheet_id}: {exc}") from exc
        return {"title": spreadsheet.title, "sheets": titles}
