"""Relational source of truth for events, students and attendances (Supabase)."""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional

from supabase import Client, create_client

from ..exceptions import ConfigurationError

log = logging.getLogger(__name__)

Row = Dict[str, Any]


class AttendanceStore:
    """Query/insert surface the registration service relies on.

    Lookups return at most one row or ``None``.
    """

    def get_event(self, event_id: str) -> Optional[Row]:
        raise NotImplementedError

    def get_student_by_document(self, document_id: str) -> Optional[Row]:
        raise NotImplementedError

    def get_attendance(self, event_id: str, student_id: Any) -> Optional[Row]:
        raise NotImplementedError

    def insert_attendance(self, event_id: str, student_id: Any, verified_by: Optional[str] = None) -> Row:
        raise NotImplementedError


class SupabaseAttendanceStore(AttendanceStore):
    def __init__(self, client: Client):
        self.client = client

    @classmethod
    def from_config(cls, cfg: Mapping[str, Any]) -> "SupabaseAttendanceStore":
        url = cfg.get("SUPABASE_URL")
        key = cfg.get("SUPABASE_KEY")
        if not url or not key:
            raise ConfigurationError("SUPABASE_URL and SUPABASE_KEY must be configured.")
        log.debug("Creating Supabase client for %s", url)
        return cls(create_client(url, key))

    def _first(self, table: str, **filters: Any) -> Optional[Row]:
        query = self.client.table(table).select("*")
        for column, value in filters.items():
            query = query.eq(column, value)
        res = query.limit(1).execute()
        rows = res.data or []
        return rows[0] if rows else None

    def get_event(self, event_id: str) -> Optional[Row]:
        return self._first("events", id=event_id)

    def get_student_by_document(self, document_id: str) -> Optional[Row]:
        return self._first("students", document_id=document_id)

    def get_attendance(self, event_id: str, student_id: Any) -> Optional[Row]:
        return self._first("attendances", event_id=event_id, student_id=student_id)

    def insert_attendance(self, event_id: str, student_id: Any, verified_by: Optional[str] = None) -> Row:
        payload: Row = {"event_id": event_id, "student_id": student_id}
        if verified_by:
            payload["verified_by"] = verified_by
        res = self.client.table("attendances").insert(payload).execute()
        rows = res.data or []
        log.debug("Inserted attendance", extra={"event_id": event_id, "student_id": student_id})
        return rows[0] if rows else payload
