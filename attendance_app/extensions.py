"""Lazily built collaborators shared by the blueprints.

Each one is created on first use from ``app.config`` and cached in
``app.extensions``; tests pre-seed the same keys with fakes.
"""

from __future__ import annotations

import threading

from .integrations.attendance_store import SupabaseAttendanceStore
from .integrations.reconciler import build_reconciler
from .integrations.sheets_client import SheetClient
from .services.registration import RegistrationService

STORE_KEY = "attendance_store"
SHEET_CLIENT_KEY = "sheet_client"
RECONCILER_KEY = "sheets_reconciler"

_lock = threading.RLock()


def _cached(app, key, factory):
    with _lock:
        if key not in app.extensions:
            app.extensions[key] = factory()
        return app.extensions[key]


def get_store(app):
    return _cached(app, STORE_KEY, lambda: SupabaseAttendanceStore.from_config(app.config))


def get_sheet_client(app):
    return _cached(app, SHEET_CLIENT_KEY, lambda: SheetClient.from_config(app.config))


def get_reconciler(app):
    """Raises ``ConfigurationError`` while group ids or credentials are missing."""

    return _cached(app, RECONCILER_KEY, lambda: build_reconciler(app.config, get_sheet_client(app)))


def get_registration_service(app) -> RegistrationService:
    def mirror(record):
        return get_reconciler(app).reconcile(record)

    return RegistrationService(
        get_store(app),
        mirror,
        tz_name=app.config.get("TZ", "America/Bogota"),
        mirror_mode=app.config.get("SHEETS_SYNC_MODE", "background"),
    )
