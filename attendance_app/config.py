import json
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Tuple

from .exceptions import ConfigurationError


def _env_bool(name: str, default: str = "False") -> bool:
    return os.getenv(name, default).lower() == "true"


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return bool(value)


class Config:
    """Base configuration loaded from environment variables."""

    # --- General ---
    SECRET_KEY = os.getenv("SECRET_KEY", "super-secret-key")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
    TZ = os.getenv("TZ", "America/Bogota")

    # --- Google service account ---
    GOOGLE_CLIENT_EMAIL = os.getenv("GOOGLE_CLIENT_EMAIL", "")
    # Deploy dashboards store the PEM key on one line with literal "\n".
    GOOGLE_PRIVATE_KEY = os.getenv("GOOGLE_PRIVATE_KEY", "").replace("\\n", "\n")
    GOOGLE_SERVICE_ACCOUNT_JSON = os.getenv("GOOGLE_SERVICE_ACCOUNT_JSON", "")

    # --- Google Sheets / Groups ---
    SHEET_GROUPS = tuple(
        g.strip() for g in os.getenv("SHEET_GROUPS", "GRUPO1,GRUPO2").split(",") if g.strip()
    )
    GOOGLE_SHEET_ID_GRUPO1 = os.getenv("GOOGLE_SHEET_ID_GRUPO1", "")
    GOOGLE_SHEET_ID_GRUPO2 = os.getenv("GOOGLE_SHEET_ID_GRUPO2", "")
    WORKSHEET_NAME = os.getenv("WORKSHEET_NAME", "ASISTENCIA")
    SHEETS_SYNC_MODE = os.getenv("SHEETS_SYNC_MODE", "background").lower()
    SHEETS_SCAN_ALL_GROUPS = _env_bool("SHEETS_SCAN_ALL_GROUPS")

    # --- Worksheet layout (1-based rows/columns) ---
    SHEET_HEADER_SCAN_ROWS = int(os.getenv("SHEET_HEADER_SCAN_ROWS", "10"))
    SHEET_MARKER_ROW = int(os.getenv("SHEET_MARKER_ROW", "1"))
    SHEET_DATE_ROW = int(os.getenv("SHEET_DATE_ROW", "7"))
    SHEET_DATA_START_ROW = int(os.getenv("SHEET_DATA_START_ROW", "8"))
    SHEET_DOCUMENT_COLUMN = int(os.getenv("SHEET_DOCUMENT_COLUMN", "4"))  # D
    SHEET_FIRST_EVENT_COLUMN = int(os.getenv("SHEET_FIRST_EVENT_COLUMN", "6"))  # F
    SHEET_ATTENDANCE_FIRST_COLUMN = int(os.getenv("SHEET_ATTENDANCE_FIRST_COLUMN", "7"))  # G
    SHEET_ATTENDANCE_LAST_COLUMN = int(os.getenv("SHEET_ATTENDANCE_LAST_COLUMN", "20"))  # T
    SHEET_TOTAL_COLUMN = int(os.getenv("SHEET_TOTAL_COLUMN", "21"))  # U

    # --- Relational store ---
    SUPABASE_URL = os.getenv("SUPABASE_URL", "")
    SUPABASE_KEY = os.getenv("SUPABASE_KEY", "")

    # --- Misc ---
    DEBUG = _env_bool("FLASK_DEBUG")


@dataclass(frozen=True)
class SheetLayout:
    """Structural conventions of the attendance worksheet.

    Every value is a 1-based spreadsheet coordinate.  The defaults match the
    current ASISTENCIA template; older workbooks put the roster one row higher.
    """

    header_scan_rows: int = 10
    marker_row: int = 1
    date_row: int = 7
    data_start_row: int = 8
    document_column: int = 4
    first_event_column: int = 6
    attendance_first_column: int = 7
    attendance_last_column: int = 20
    total_column: int = 21

    def __post_init__(self):
        if self.attendance_first_column > self.attendance_last_column:
            raise ConfigurationError("Attendance column range is empty.")
        if min(
            self.header_scan_rows,
            self.marker_row,
            self.date_row,
            self.data_start_row,
            self.document_column,
            self.first_event_column,
            self.total_column,
        ) < 1:
            raise ConfigurationError("Worksheet layout coordinates are 1-based.")

    @classmethod
    def from_mapping(cls, cfg: Mapping[str, Any]) -> "SheetLayout":
        defaults = cls()
        return cls(
            header_scan_rows=int(cfg.get("SHEET_HEADER_SCAN_ROWS", defaults.header_scan_rows)),
            marker_row=int(cfg.get("SHEET_MARKER_ROW", defaults.marker_row)),
            date_row=int(cfg.get("SHEET_DATE_ROW", defaults.date_row)),
            data_start_row=int(cfg.get("SHEET_DATA_START_ROW", defaults.data_start_row)),
            document_column=int(cfg.get("SHEET_DOCUMENT_COLUMN", defaults.document_column)),
            first_event_column=int(cfg.get("SHEET_FIRST_EVENT_COLUMN", defaults.first_event_column)),
            attendance_first_column=int(
                cfg.get("SHEET_ATTENDANCE_FIRST_COLUMN", defaults.attendance_first_column)
            ),
            attendance_last_column=int(
                cfg.get("SHEET_ATTENDANCE_LAST_COLUMN", defaults.attendance_last_column)
            ),
            total_column=int(cfg.get("SHEET_TOTAL_COLUMN", defaults.total_column)),
        )


@dataclass(frozen=True)
class SheetsSettings:
    """Everything the reconciler needs: ordered groups plus the layout."""

    groups: Tuple[Tuple[str, str], ...]
    worksheet_name: str = "ASISTENCIA"
    layout: SheetLayout = field(default_factory=SheetLayout)
    scan_all_groups: bool = False

    @property
    def group_names(self) -> List[str]:
        return [name for name, _ in self.groups]

    def sheet_id_for(self, group: str) -> str:
        return dict(self.groups)[group]

    @classmethod
    def from_mapping(cls, cfg: Mapping[str, Any]) -> "SheetsSettings":
        """Build settings from a Flask config (or any mapping).

        Raises ``ConfigurationError`` when a configured group has no
        spreadsheet id.
        """

        group_names = list(cfg.get("SHEET_GROUPS") or ("GRUPO1", "GRUPO2"))
        groups: List[Tuple[str, str]] = []
        missing: List[str] = []
        for name in group_names:
            key = f"GOOGLE_SHEET_ID_{name}"
            # groups beyond the two Config attributes only exist in the environment
            sheet_id = (cfg.get(key) or os.getenv(key) or "").strip()
            if not sheet_id:
                missing.append(key)
                continue
            groups.append((name, sheet_id))

        if missing:
            raise ConfigurationError(
                "Missing spreadsheet ids in configuration: " + ", ".join(missing)
            )

        return cls(
            groups=tuple(groups),
            worksheet_name=cfg.get("WORKSHEET_NAME") or "ASISTENCIA",
            layout=SheetLayout.from_mapping(cfg),
            scan_all_groups=_as_bool(cfg.get("SHEETS_SCAN_ALL_GROUPS", False)),
        )


def credentials_info(cfg: Mapping[str, Any]) -> Dict[str, str]:
    """Return service-account info usable by ``Credentials.from_service_account_info``.

    Either the email + PEM key pair or the full JSON key may be configured;
    the pair wins when both are present.
    """

    email = (cfg.get("GOOGLE_CLIENT_EMAIL") or "").strip()
    key = (cfg.get("GOOGLE_PRIVATE_KEY") or "").replace("\\n", "\n")
    if email and key:
        return {
            "type": "service_account",
            "client_email": email,
            "private_key": key,
            "token_uri": "https://oauth2.googleapis.com/token",
        }

    raw_json = cfg.get("GOOGLE_SERVICE_ACCOUNT_JSON") or ""
    if raw_json:
        try:
            return json.loads(raw_json)
        except json.JSONDecodeError as exc:
            raise ConfigurationError("Invalid service account JSON payload.") from exc

    raise ConfigurationError(
        "Google service account is not configured. Set GOOGLE_CLIENT_EMAIL and "
        "GOOGLE_PRIVATE_KEY (or GOOGLE_SERVICE_ACCOUNT_JSON)."
    )
