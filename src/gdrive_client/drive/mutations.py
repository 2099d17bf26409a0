"""Folder creation and trash lifecycle operations."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

from gdrive_client.drive.errors import DriveValidationError
from gdrive_client.drive.models import FIELD_ID, FIELD_TRASHED, FOLDER_MIME_TYPE

if TYPE_CHECKING:
    from gdrive_client.drive.cancel import CancelScope
    from gdrive_client.drive.client import DriveClient

logger = logging.getLogger(__name__)


def _require_id(file_id: str) -> str:
    if not file_id:
        raise DriveValidationError("file ID cannot be empty", field="file_id")
    return f"/files/{quote(file_id, safe='')}"


class DriveMutations:
    """Single-request state changes. No local state is kept."""

    def __init__(self, client: DriveClient) -> None:
        self._client = client

    def create_folder(self, scope: CancelScope, name: str, parent_id: str = "") -> str:
        """Create a folder and return its ID.

        Args:
            scope: Cancellation scope.
            name: Folder name (required).
            parent_id: Parent folder ID; empty creates it in My Drive root.
        """
        if not name:
            raise DriveValidationError("folder name cannot be empty", field="name")
        body: dict[str, Any] = {"name": name, "mimeType": FOLDER_MIME_TYPE}
        if parent_id:
            body["parents"] = [parent_id]

        folder = self._client.request_json(
            scope,
            "POST",
            "/files",
            operation="unable to create folder",
            params={"fields": "id, name"},
            body=body,
        )
        folder_id = str(folder.get(FIELD_ID, ""))
        logger.info("[create_folder] folder created; name:%s;folder_id:%s", name, folder_id)
        return folder_id

    def trash(self, scope: CancelScope, file_id: str) -> None:
        """Move a file or folder to the trash."""
        self._set_trashed(scope, file_id, trashed=True)
        logger.info("[trash] file moved to trash; file_id:%s", file_id)

    def restore(self, scope: CancelScope, file_id: str) -> None:
        """Restore a file or folder from the trash."""
        self._set_trashed(scope, file_id, trashed=False)
        logger.info("[restore] file restored from trash; file_id:%s", file_id)

    def delete_permanently(self, scope: CancelScope, file_id: str) -> None:
        """Permanently delete a file or folder. This cannot be undone."""
        path = _require_id(file_id)
        self._client.request_json(
            scope, "DELETE", path, operation="unable to delete file permanently"
        )
        logger.info("[delete_permanently] file permanently deleted; file_id:%s", file_id)

    def _set_trashed(self, scope: CancelScope, file_id: str, *, trashed: bool) -> None:
        path = _require_id(file_id)
        action = "trash" if trashed else "restore"
        self._client.request_json(
            scope,
            "PATCH",
            path,
            operation=f"unable to {action} file",
            body={FIELD_TRASHED: trashed},
        )
