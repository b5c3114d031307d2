"""Exception hierarchy shared by the routes, services and sheet integration."""


class AttendanceError(Exception):
    """Base class for every error raised by this application."""


class ConfigurationError(AttendanceError, RuntimeError):
    """Raised when a required setting (credentials, sheet ids) is missing."""


class SheetsDatastoreError(AttendanceError):
    """The spreadsheet API could not be reached, refused the credentials or
    rejected the request (invalid sheet, quota exceeded)."""


class EventNotFoundError(AttendanceError, LookupError):
    """Raised when the requested event does not exist."""


class StudentNotFoundError(AttendanceError, LookupError):
    """Raised when no student carries the submitted document id."""


class DuplicateAttendanceError(AttendanceError):
    """Raised when the student already has attendance for the event."""


class StudentNotFoundAnywhereError(AttendanceError, LookupError):
    """Raised when none of the configured groups lists the student."""

    def __init__(self, document_id: str, groups):
        self.document_id = document_id
        self.groups = list(groups)
        super().__init__(
            f"Student with document {document_id} not found in any group "
            f"({', '.join(self.groups)})"
        )
