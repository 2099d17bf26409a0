"""Exception hierarchy for Drive operations."""

from __future__ import annotations


class DriveError(Exception):
    """Base class for every error raised by gdrive_client."""


class DriveValidationError(DriveError, ValueError):
    """Raised when an argument is rejected locally, before any request is issued."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class DriveAuthError(DriveError):
    """Raised when credentials cannot be loaded or parsed."""


class DriveApiError(DriveError):
    """Raised when the Drive API returns a non-success status code."""

    def __init__(
        self,
        status_code: int,
        message: str,
        reason: str = "",
        operation: str = "",
    ) -> None:
        prefix = f"{operation}: " if operation else ""
        super().__init__(f"{prefix}Drive API error {status_code}: {message}")
        self.status_code = status_code
        self.message = message
        self.reason = reason
        self.operation = operation


class NotWorkspaceDocumentError(DriveError):
    """Raised when a workspace-only operation targets a regular file."""

    def __init__(self, file_id: str, mime_type: str = "") -> None:
        detail = f" (MIME type: {mime_type})" if mime_type else ""
        super().__init__(f"file {file_id} is not a Google Workspace document{detail}")
        self.file_id = file_id
        self.mime_type = mime_type


class DriveTransportError(DriveError):
    """Raised when a request fails before any response is received."""

    def __init__(self, message: str, operation: str = "") -> None:
        super().__init__(message)
        self.operation = operation


class DriveTransferError(DriveError):
    """Raised when a byte copy fails after the response began.

    ``bytes_written`` holds the number of bytes already delivered to the
    sink, so callers can decide whether to resume with a ranged request.
    """

    def __init__(self, message: str, bytes_written: int = 0) -> None:
        super().__init__(message)
        self.bytes_written = bytes_written


class DriveCancelledError(DriveTransferError):
    """Raised when the operation's CancelScope fired or its deadline passed."""
