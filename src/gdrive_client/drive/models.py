"""Data models and field names for Google Drive v3 files."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from gdrive_client.drive.errors import DriveValidationError

# Drive API JSON field names
FIELD_ID = "id"
FIELD_NAME = "name"
FIELD_MIME_TYPE = "mimeType"
FIELD_SIZE = "size"
FIELD_PARENTS = "parents"
FIELD_WEB_VIEW_LINK = "webViewLink"
FIELD_EXPORT_LINKS = "exportLinks"
FIELD_TRASHED = "trashed"

# files.list response keys
RESPONSE_FILES = "files"
RESPONSE_NEXT_PAGE_TOKEN = "nextPageToken"

FOLDER_MIME_TYPE = "application/vnd.google-apps.folder"
WORKSPACE_MIME_PREFIX = "application/vnd.google-apps."
DEFAULT_CONTENT_TYPE = "application/octet-stream"

ROOT_PATH = "My Drive"
MAX_PATH_DEPTH = 10
LIST_PAGE_SIZE = 100
FOLDER_PAGE_SIZE = 1000


class ExportFormat(str, Enum):
    """Target MIME types for exporting Google Workspace documents.

    Docs: PDF, DOCX, ODT, RTF, TXT, HTML, EPUB, ZIP.
    Sheets: PDF, XLSX, ODS, CSV, HTML, ZIP.
    Slides: PDF, PPTX, ODP, TXT, JPEG, PNG, SVG.
    Drawings: PDF, JPEG, PNG, SVG.
    """

    PDF = "application/pdf"
    DOCX = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
    XLSX = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    PPTX = "application/vnd.openxmlformats-officedocument.presentationml.presentation"
    ODT = "application/vnd.oasis.opendocument.text"
    ODS = "application/vnd.oasis.opendocument.spreadsheet"
    ODP = "application/vnd.oasis.opendocument.presentation"
    RTF = "application/rtf"
    TXT = "text/plain"
    HTML = "text/html"
    ZIP = "application/zip"
    JPEG = "image/jpeg"
    PNG = "image/png"
    SVG = "image/svg+xml"
    CSV = "text/csv"
    EPUB = "application/epub+zip"


@dataclass(frozen=True)
class ByteRange:
    """Inclusive byte span for partial downloads.

    Attributes:
        start: First byte offset (zero-based, inclusive).
        end: Last byte offset (inclusive).
    """

    start: int
    end: int

    def __post_init__(self) -> None:
        if self.start < 0 or self.end < 0:
            raise DriveValidationError("byte positions cannot be negative", field="byte_range")
        if self.start > self.end:
            raise DriveValidationError(
                "start byte must be less than or equal to end byte", field="byte_range"
            )

    @property
    def length(self) -> int:
        return self.end - self.start + 1

    @property
    def header_value(self) -> str:
        """Value for the HTTP ``Range`` request header."""
        return f"bytes={self.start}-{self.end}"


@dataclass(frozen=True)
class FolderEntry:
    """A folder as seen by the path resolver."""

    name: str
    parents: tuple[str, ...] = ()


FolderIndex = dict[str, FolderEntry]


@dataclass(frozen=True)
class FileRecord:
    """A non-folder Drive file with its resolved folder path.

    Attributes:
        id: Drive file ID.
        name: Display name.
        mime_type: Content type reported by Drive.
        size: Size in bytes (0 for workspace documents).
        web_view_link: Browser URL for the file.
        parents: Parent folder IDs as returned by the API.
        folder_path: Resolved path, e.g. "My Drive/Projects/2024".
    """

    id: str
    name: str
    mime_type: str
    size: int
    web_view_link: str
    parents: tuple[str, ...]
    folder_path: str


def parse_size(raw: dict[str, Any]) -> int:
    """Return the object's byte size; Drive sends it as a decimal string or omits it."""
    value = raw.get(FIELD_SIZE)
    if value in (None, ""):
        return 0
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def is_folder(raw: dict[str, Any]) -> bool:
    return raw.get(FIELD_MIME_TYPE) == FOLDER_MIME_TYPE
