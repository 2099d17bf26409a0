"""Paginated file enumeration with folder-path annotation."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from gdrive_client.drive.folders import build_folder_index, resolve_folder_path
from gdrive_client.drive.models import (
    FIELD_ID,
    FIELD_MIME_TYPE,
    FIELD_NAME,
    FIELD_PARENTS,
    FIELD_WEB_VIEW_LINK,
    FOLDER_PAGE_SIZE,
    LIST_PAGE_SIZE,
    MAX_PATH_DEPTH,
    RESPONSE_FILES,
    RESPONSE_NEXT_PAGE_TOKEN,
    ROOT_PATH,
    FileRecord,
    FolderIndex,
    is_folder,
    parse_size,
)

if TYPE_CHECKING:
    from gdrive_client.config import AppConfig
    from gdrive_client.drive.cancel import CancelScope
    from gdrive_client.drive.client import DriveClient

logger = logging.getLogger(__name__)

FILE_FIELDS = "nextPageToken, files(id, name, mimeType, size, webViewLink, parents)"
ROOT_FOLDER_ALIAS = "root"


def _quote(value: str) -> str:
    """Escape a value for use inside a single-quoted Drive query literal."""
    return value.replace("\\", "\\\\").replace("'", "\\'")


def folder_query(folder_id: str) -> str:
    """Query selecting non-trashed children of a folder ("" means My Drive root)."""
    parent = _quote(folder_id) if folder_id else ROOT_FOLDER_ALIAS
    return f"'{parent}' in parents and trashed=false"


class FileLister:
    """Enumerates Drive files across all pages and resolves their folder paths."""

    def __init__(
        self,
        client: DriveClient,
        page_size: int = LIST_PAGE_SIZE,
        folder_page_size: int = FOLDER_PAGE_SIZE,
        root_path: str = ROOT_PATH,
        max_path_depth: int = MAX_PATH_DEPTH,
    ) -> None:
        """Initialise the lister.

        Args:
            client: Authenticated DriveClient.
            page_size: Files per listing request.
            folder_page_size: Folders per folder-index request.
            root_path: Root token prepended to every resolved path.
            max_path_depth: Maximum folder levels resolved per file.
        """
        self._client = client
        self._page_size = page_size
        self._folder_page_size = folder_page_size
        self._root_path = root_path
        self._max_path_depth = max_path_depth

    def list_all(self, scope: CancelScope) -> list[FileRecord]:
        """List every non-folder, non-empty file visible to the credential.

        Zero-byte entries are skipped along with folders; this also drops
        workspace documents, which report no size.

        Args:
            scope: Cancellation scope for all requests in this call.

        Returns:
            FileRecords in the order the API returned them.
        """
        return self._enumerate(scope, query=None)

    def list_in_folder(self, scope: CancelScope, folder_id: str = "") -> list[FileRecord]:
        """List non-folder, non-empty files directly inside one folder.

        Args:
            scope: Cancellation scope for all requests in this call.
            folder_id: Parent folder ID. Empty string lists the My Drive root.

        Returns:
            FileRecords in the order the API returned them.
        """
        return self._enumerate(scope, query=folder_query(folder_id))

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _enumerate(self, scope: CancelScope, query: str | None) -> list[FileRecord]:
        logger.info("[list_files] starting enumeration; query:%s", query or "<all>")
        index = build_folder_index(self._client, scope, self._folder_page_size)

        records: list[FileRecord] = []
        skipped = 0
        page_token: str | None = None
        pages = 0

        while True:
            params: dict[str, Any] = {"fields": FILE_FIELDS, "pageSize": self._page_size}
            if query:
                params["q"] = query
            if page_token:
                params["pageToken"] = page_token

            response = self._client.get_json(
                scope, "/files", operation="unable to retrieve files", params=params
            )
            pages += 1

            items = response.get(RESPONSE_FILES, [])
            logger.debug("[list_files] page received; page:%d;items:%d", pages, len(items))
            for raw in items:
                if is_folder(raw) or parse_size(raw) == 0:
                    skipped += 1
                    continue
                records.append(self._to_record(raw, index))

            page_token = response.get(RESPONSE_NEXT_PAGE_TOKEN)
            if not page_token:
                break

        logger.info(
            "[list_files] enumeration complete; files:%d;skipped:%d;pages:%d",
            len(records),
            skipped,
            pages,
        )
        return records

    def _to_record(self, raw: dict[str, Any], index: FolderIndex) -> FileRecord:
        parents = tuple(raw.get(FIELD_PARENTS) or ())
        return FileRecord(
            id=raw.get(FIELD_ID, ""),
            name=raw.get(FIELD_NAME, ""),
            mime_type=raw.get(FIELD_MIME_TYPE, ""),
            size=parse_size(raw),
            web_view_link=raw.get(FIELD_WEB_VIEW_LINK, ""),
            parents=parents,
            folder_path=resolve_folder_path(
                parents, index, root=self._root_path, max_depth=self._max_path_depth
            ),
        )


def file_lister_from_config(client: DriveClient, config: AppConfig) -> FileLister:
    """Construct a FileLister from application configuration.

    Args:
        client: Authenticated DriveClient instance.
        config: Application configuration instance.

    Returns:
        Configured FileLister instance.
    """
    return FileLister(
        client=client,
        page_size=config.list_page_size,
        folder_page_size=config.folder_page_size,
        root_path=config.root_path,
        max_path_depth=config.max_path_depth,
    )
