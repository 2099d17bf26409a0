"""Streaming, ranged and export transfers against the Drive API."""

from __future__ import annotations

import codecs
import contextlib
import itertools
import logging
import mimetypes
from collections.abc import Callable, Iterable, Iterator
from pathlib import Path
from typing import IO, TYPE_CHECKING, Any
from urllib.parse import quote

import requests

from gdrive_client.drive.client import raise_for_status
from gdrive_client.drive.errors import (
    DriveApiError,
    DriveCancelledError,
    DriveTransferError,
    DriveValidationError,
    NotWorkspaceDocumentError,
)
from gdrive_client.drive.models import (
    DEFAULT_CONTENT_TYPE,
    FIELD_EXPORT_LINKS,
    FIELD_ID,
    FIELD_MIME_TYPE,
    FOLDER_MIME_TYPE,
    WORKSPACE_MIME_PREFIX,
    ByteRange,
    ExportFormat,
)

if TYPE_CHECKING:
    from gdrive_client.config import AppConfig
    from gdrive_client.drive.cancel import CancelScope
    from gdrive_client.drive.client import DriveClient

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 1024 * 1024
SNIFF_SAMPLE_SIZE = 512

FULL_CONTENT = (200,)
PARTIAL_CONTENT = (200, 206)
UPLOAD_CREATED = (200, 201)

NOT_EXPORTABLE_REASON = "fileNotExportable"

ContentSniffer = Callable[[bytes, str], str]


def guess_content_type(sample: bytes, name: str) -> str:
    """Guess a content type from the file name, then from a leading sample.

    Falls back to text/plain for samples that decode as UTF-8 without NUL
    bytes and to application/octet-stream otherwise.
    """
    guessed, _ = mimetypes.guess_type(name)
    if guessed:
        return guessed
    if not sample or b"\x00" in sample:
        return DEFAULT_CONTENT_TYPE
    try:
        # The sample may end mid-character; an incremental decoder tolerates that.
        codecs.getincrementaldecoder("utf-8")().decode(sample, final=False)
    except UnicodeDecodeError:
        return DEFAULT_CONTENT_TYPE
    return "text/plain; charset=utf-8"


def _require(value: str, field: str, label: str) -> None:
    if not value:
        raise DriveValidationError(f"{label} cannot be empty", field=field)


def _format_value(export_format: ExportFormat | str) -> str:
    if isinstance(export_format, ExportFormat):
        return export_format.value
    return export_format


def _file_path(file_id: str, *suffix: str) -> str:
    parts = [quote(file_id, safe=""), *(quote(s, safe="") for s in suffix)]
    return "/files/" + "/".join(parts)


def _prepare_output(local_path: str | Path) -> Path:
    if not str(local_path):
        raise DriveValidationError("output path cannot be empty", field="local_path")
    path = Path(local_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    return path


def _iter_chunks(source: IO[bytes], chunk_size: int) -> Iterator[bytes]:
    while True:
        chunk = source.read(chunk_size)
        if not chunk:
            return
        yield chunk


class TransferEngine:
    """Moves file content between Drive and local byte sinks/sources.

    Bodies are copied chunk by chunk and never buffered whole. Cancellation
    is checked between chunks, and the in-flight response is closed when the
    scope is cancelled from another thread.
    """

    def __init__(
        self,
        client: DriveClient,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        sniffer: ContentSniffer = guess_content_type,
    ) -> None:
        """Initialise the transfer engine.

        Args:
            client: Authenticated DriveClient.
            chunk_size: Bytes per read/write when streaming.
            sniffer: Callable (sample, name) -> content type used for uploads
                that do not specify one.
        """
        self._client = client
        self._chunk_size = chunk_size
        self._sniffer = sniffer

    # ------------------------------------------------------------------
    # Downloads
    # ------------------------------------------------------------------

    def stream_download(self, scope: CancelScope, file_id: str, sink: IO[bytes]) -> int:
        """Stream a file's content into ``sink``.

        Returns:
            Number of bytes written.

        Raises:
            DriveValidationError: If file_id is empty.
            DriveApiError: If the API does not answer 200.
            DriveTransferError: If the copy fails partway (carries bytes_written).
        """
        _require(file_id, "file_id", "file ID")
        return self._download(
            scope,
            _file_path(file_id),
            sink,
            operation="unable to download file",
            accepted=FULL_CONTENT,
        )

    def download_to_path(self, scope: CancelScope, file_id: str, local_path: str | Path) -> int:
        """Download a file to a local path, creating parent directories."""
        _require(file_id, "file_id", "file ID")
        path = _prepare_output(local_path)
        with path.open("wb") as sink:
            written = self.stream_download(scope, file_id, sink)
        logger.info("[download_to_path] downloaded file; file_id:%s;bytes:%d", file_id, written)
        return written

    def range_download(
        self,
        scope: CancelScope,
        file_id: str,
        sink: IO[bytes],
        byte_range: ByteRange,
    ) -> int:
        """Download an inclusive byte range of a file into ``sink``.

        Both 200 and 206 are accepted. A 200 means the Range header was
        ignored; the requested span is then cut out of the full body, so the
        sink receives the same bytes either way. Not supported for workspace
        documents, which have no raw bytes; use export_document() instead.

        Returns:
            Number of bytes written.
        """
        _require(file_id, "file_id", "file ID")
        return self._download(
            scope,
            _file_path(file_id),
            sink,
            operation="unable to download file range",
            accepted=PARTIAL_CONTENT,
            byte_range=byte_range,
        )

    def range_download_to_path(
        self,
        scope: CancelScope,
        file_id: str,
        local_path: str | Path,
        byte_range: ByteRange,
    ) -> int:
        _require(file_id, "file_id", "file ID")
        path = _prepare_output(local_path)
        with path.open("wb") as sink:
            return self.range_download(scope, file_id, sink, byte_range)

    def download_revision(
        self,
        scope: CancelScope,
        file_id: str,
        revision_id: str,
        sink: IO[bytes],
    ) -> int:
        """Stream a specific revision's content into ``sink``.

        The revision must be marked "Keep Forever" to be downloadable.
        """
        _require(file_id, "file_id", "file ID")
        _require(revision_id, "revision_id", "revision ID")
        return self._download(
            scope,
            _file_path(file_id, "revisions", revision_id),
            sink,
            operation="unable to download revision",
            accepted=FULL_CONTENT,
        )

    def range_download_revision(
        self,
        scope: CancelScope,
        file_id: str,
        revision_id: str,
        sink: IO[bytes],
        byte_range: ByteRange,
    ) -> int:
        """Download an inclusive byte range of a specific revision."""
        _require(file_id, "file_id", "file ID")
        _require(revision_id, "revision_id", "revision ID")
        return self._download(
            scope,
            _file_path(file_id, "revisions", revision_id),
            sink,
            operation="unable to download revision range",
            accepted=PARTIAL_CONTENT,
            byte_range=byte_range,
        )

    # ------------------------------------------------------------------
    # Exports
    # ------------------------------------------------------------------

    def export_document(
        self,
        scope: CancelScope,
        file_id: str,
        sink: IO[bytes],
        export_format: ExportFormat | str,
    ) -> int:
        """Export a Google Workspace document to ``export_format`` and stream it.

        Format legality per document type and the service's export size
        limit are enforced remotely and surface as DriveApiError.

        Returns:
            Number of bytes written.

        Raises:
            DriveValidationError: If file_id or export_format is empty.
            NotWorkspaceDocumentError: If the service reports the file is not exportable.
            DriveApiError: For any other non-200 answer.
        """
        _require(file_id, "file_id", "file ID")
        mime_type = _format_value(export_format)
        _require(mime_type, "export_format", "export format")
        try:
            return self._download(
                scope,
                _file_path(file_id, "export"),
                sink,
                operation="unable to export document",
                accepted=FULL_CONTENT,
                params={"mimeType": mime_type},
            )
        except DriveApiError as exc:
            if exc.reason == NOT_EXPORTABLE_REASON:
                raise NotWorkspaceDocumentError(file_id) from exc
            raise

    def export_document_to_path(
        self,
        scope: CancelScope,
        file_id: str,
        local_path: str | Path,
        export_format: ExportFormat | str,
    ) -> int:
        """Export a Google Workspace document to a local file."""
        _require(file_id, "file_id", "file ID")
        path = _prepare_output(local_path)
        with path.open("wb") as sink:
            written = self.export_document(scope, file_id, sink, export_format)
        logger.info(
            "[export_document_to_path] exported document; file_id:%s;format:%s;bytes:%d",
            file_id,
            _format_value(export_format),
            written,
        )
        return written

    def get_export_links(self, scope: CancelScope, file_id: str) -> dict[str, str]:
        """Return the MIME type → download URL map of a workspace document.

        Raises:
            NotWorkspaceDocumentError: If the file has no export links.
        """
        _require(file_id, "file_id", "file ID")
        meta = self._client.get_json(
            scope,
            _file_path(file_id),
            operation="unable to get file metadata",
            params={"fields": "exportLinks, mimeType"},
        )
        links = meta.get(FIELD_EXPORT_LINKS) or {}
        if not links:
            raise NotWorkspaceDocumentError(file_id, meta.get(FIELD_MIME_TYPE, ""))
        return dict(links)

    def is_workspace_document(self, scope: CancelScope, file_id: str) -> bool:
        """True for Docs, Sheets, Slides, Drawings and similar; False for folders and binaries."""
        _require(file_id, "file_id", "file ID")
        meta = self._client.get_json(
            scope,
            _file_path(file_id),
            operation="unable to get file metadata",
            params={"fields": "mimeType"},
        )
        mime_type = meta.get(FIELD_MIME_TYPE, "")
        if mime_type == FOLDER_MIME_TYPE:
            return False
        return mime_type.startswith(WORKSPACE_MIME_PREFIX) and len(mime_type) > len(
            WORKSPACE_MIME_PREFIX
        )

    # ------------------------------------------------------------------
    # Uploads
    # ------------------------------------------------------------------

    def upload_from_path(
        self,
        scope: CancelScope,
        local_path: str | Path,
        name: str = "",
        parent_id: str = "",
        content_type: str | None = None,
    ) -> str:
        """Upload a local file and return the new file ID.

        Args:
            scope: Cancellation scope.
            local_path: File to upload.
            name: Display name in Drive; defaults to the file's basename.
            parent_id: Parent folder ID; empty uploads to My Drive root.
            content_type: Content type; sniffed from the first bytes when omitted.
        """
        if not str(local_path):
            raise DriveValidationError("file path cannot be empty", field="local_path")
        path = Path(local_path)
        name = name or path.name

        with path.open("rb") as source:
            sample = source.read(SNIFF_SAMPLE_SIZE)
            mime_type = content_type or self._sniffer(sample, name)
            logger.debug("[upload_from_path] content type chosen; name:%s;type:%s", name, mime_type)
            chunks = itertools.chain([sample], _iter_chunks(source, self._chunk_size))
            return self._upload(scope, chunks, name, mime_type, parent_id)

    def upload_from_stream(
        self,
        scope: CancelScope,
        source: IO[bytes],
        name: str,
        content_type: str = "",
        parent_id: str = "",
    ) -> str:
        """Upload the remaining content of a readable binary stream.

        Args:
            scope: Cancellation scope.
            source: Readable binary stream; it is not closed here.
            name: Display name in Drive (required).
            content_type: Content type; empty means application/octet-stream.
            parent_id: Parent folder ID; empty uploads to My Drive root.

        Returns:
            ID of the created file.
        """
        if source is None:
            raise DriveValidationError("source cannot be None", field="source")
        _require(name, "name", "file name")
        mime_type = content_type or DEFAULT_CONTENT_TYPE
        chunks = _iter_chunks(source, self._chunk_size)
        return self._upload(scope, chunks, name, mime_type, parent_id)

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _download(
        self,
        scope: CancelScope,
        path: str,
        sink: IO[bytes],
        *,
        operation: str,
        accepted: tuple[int, ...],
        params: dict[str, str] | None = None,
        byte_range: ByteRange | None = None,
    ) -> int:
        query = {"alt": "media"} if params is None else params
        headers = {"Range": byte_range.header_value} if byte_range else None
        with self._client.open_stream(
            scope,
            "GET",
            self._client.url(path),
            operation=operation,
            accepted=accepted,
            headers=headers,
            params=query,
        ) as response:
            skip, limit = 0, None
            if byte_range is not None:
                # A 200 carries the whole object; a 206 starts at byte_range.start.
                skip = byte_range.start if response.status_code == 200 else 0
                limit = byte_range.length
            written = self._copy_body(scope, response, sink, operation, skip=skip, limit=limit)
        logger.debug("[_download] transfer complete; operation:%s;bytes:%d", operation, written)
        return written

    def _copy_body(
        self,
        scope: CancelScope,
        response: requests.Response,
        sink: IO[bytes],
        operation: str,
        *,
        skip: int = 0,
        limit: int | None = None,
    ) -> int:
        """Copy the response body into ``sink``.

        The first ``skip`` body bytes are dropped and at most ``limit`` bytes
        are written; iteration stops once the limit is reached.
        """
        written = 0
        with scope.bind(response.close):
            try:
                for chunk in response.iter_content(chunk_size=self._chunk_size):
                    scope.check(operation, bytes_written=written)
                    if skip:
                        dropped = min(skip, len(chunk))
                        chunk = chunk[dropped:]
                        skip -= dropped
                    if limit is not None:
                        chunk = chunk[: limit - written]
                    if chunk:
                        sink.write(chunk)
                        written += len(chunk)
                    if limit is not None and written >= limit:
                        break
            except DriveCancelledError:
                logger.info(
                    "[_copy_body] transfer cancelled; operation:%s;bytes:%d", operation, written
                )
                raise
            except Exception as exc:
                # Closing the response from another thread surfaces as an
                # arbitrary read error inside urllib3.
                if scope.cancelled:
                    raise DriveCancelledError(
                        f"{operation}: cancelled", bytes_written=written
                    ) from exc
                if not isinstance(exc, (requests.RequestException, OSError)):
                    raise
                logger.error(
                    "[_copy_body] stream copy failed; operation:%s;bytes:%d;error:%s",
                    operation,
                    written,
                    exc,
                )
                raise DriveTransferError(
                    f"{operation}: unable to stream content: {exc}", bytes_written=written
                ) from exc
        # A close triggered by cancel() can end iteration silently.
        scope.check(operation, bytes_written=written)
        return written

    def _upload(
        self,
        scope: CancelScope,
        chunks: Iterable[bytes],
        name: str,
        content_type: str,
        parent_id: str,
    ) -> str:
        operation = "unable to upload file"
        metadata: dict[str, Any] = {"name": name, "mimeType": content_type}
        if parent_id:
            metadata["parents"] = [parent_id]

        session = self._client.send(
            scope,
            "POST",
            self._client.url("/files", upload=True),
            operation=operation,
            params={"uploadType": "resumable"},
            json=metadata,
            headers={"X-Upload-Content-Type": content_type},
        )
        with contextlib.closing(session):
            raise_for_status(session, operation)
            location = session.headers.get("Location")
        if not location:
            raise DriveApiError(
                session.status_code, "upload session URI missing", operation=operation
            )

        response = self._client.send(
            scope,
            "PUT",
            location,
            operation=operation,
            data=self._iter_body(scope, chunks, operation),
            headers={"Content-Type": content_type},
        )
        with contextlib.closing(response):
            raise_for_status(response, operation, UPLOAD_CREATED)
            file_id = str(response.json().get(FIELD_ID, ""))

        logger.info(
            "[upload] file uploaded; name:%s;file_id:%s;content_type:%s",
            name,
            file_id,
            content_type,
        )
        return file_id

    @staticmethod
    def _iter_body(scope: CancelScope, chunks: Iterable[bytes], operation: str) -> Iterator[bytes]:
        sent = 0
        for chunk in chunks:
            scope.check(operation, bytes_written=sent)
            if chunk:
                yield chunk
                sent += len(chunk)


def transfer_engine_from_config(client: DriveClient, config: AppConfig) -> TransferEngine:
    """Construct a TransferEngine from application configuration.

    Args:
        client: Authenticated DriveClient instance.
        config: Application configuration instance.

    Returns:
        Configured TransferEngine instance.
    """
    return TransferEngine(client=client, chunk_size=config.chunk_size)
