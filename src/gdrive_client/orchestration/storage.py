"""Drive storage facade: the single entry point for all file operations."""

from __future__ import annotations

import logging
from pathlib import Path
from types import TracebackType
from typing import IO, TYPE_CHECKING

from gdrive_client.drive.client import DriveClient, drive_client_from_config
from gdrive_client.drive.listing import FileLister, file_lister_from_config
from gdrive_client.drive.models import ByteRange, ExportFormat, FileRecord
from gdrive_client.drive.mutations import DriveMutations
from gdrive_client.drive.transfer import TransferEngine, transfer_engine_from_config

if TYPE_CHECKING:
    from gdrive_client.config import AppConfig
    from gdrive_client.drive.cancel import CancelScope

logger = logging.getLogger(__name__)


class DriveStorage:
    """High-level Drive operations composed from the lister, transfer engine and mutations.

    Every method takes a CancelScope first. The facade keeps no mutable
    state between calls and is safe to share between threads.
    """

    def __init__(
        self,
        client: DriveClient,
        lister: FileLister,
        transfers: TransferEngine,
        mutations: DriveMutations,
    ) -> None:
        """Initialise the facade.

        Args:
            client: Authenticated DriveClient shared by all components.
            lister: FileLister for enumeration.
            transfers: TransferEngine for content movement.
            mutations: DriveMutations for lifecycle changes.
        """
        self._client = client
        self._lister = lister
        self._transfers = transfers
        self._mutations = mutations

    def __enter__(self) -> DriveStorage:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    # Listing

    def list_files(self, scope: CancelScope) -> list[FileRecord]:
        return self._lister.list_all(scope)

    def list_files_in_folder(self, scope: CancelScope, folder_id: str = "") -> list[FileRecord]:
        return self._lister.list_in_folder(scope, folder_id)

    # Downloads

    def stream_file(self, scope: CancelScope, file_id: str, sink: IO[bytes]) -> int:
        return self._transfers.stream_download(scope, file_id, sink)

    def download_file(self, scope: CancelScope, file_id: str, local_path: str | Path) -> int:
        return self._transfers.download_to_path(scope, file_id, local_path)

    def partial_download(
        self, scope: CancelScope, file_id: str, sink: IO[bytes], byte_range: ByteRange
    ) -> int:
        return self._transfers.range_download(scope, file_id, sink, byte_range)

    def partial_stream(
        self, scope: CancelScope, file_id: str, sink: IO[bytes], start: int, end: int
    ) -> int:
        """Convenience wrapper around partial_download() taking raw offsets.

        Raises:
            DriveValidationError: If the offsets are negative or start > end.
        """
        return self.partial_download(scope, file_id, sink, ByteRange(start, end))

    def download_revision(
        self, scope: CancelScope, file_id: str, revision_id: str, sink: IO[bytes]
    ) -> int:
        return self._transfers.download_revision(scope, file_id, revision_id, sink)

    def partial_download_revision(
        self,
        scope: CancelScope,
        file_id: str,
        revision_id: str,
        sink: IO[bytes],
        byte_range: ByteRange,
    ) -> int:
        return self._transfers.range_download_revision(
            scope, file_id, revision_id, sink, byte_range
        )

    # Uploads

    def upload_file(
        self,
        scope: CancelScope,
        local_path: str | Path,
        name: str = "",
        parent_id: str = "",
    ) -> str:
        return self._transfers.upload_from_path(scope, local_path, name, parent_id)

    def upload_from_stream(
        self,
        scope: CancelScope,
        source: IO[bytes],
        name: str,
        content_type: str = "",
        parent_id: str = "",
    ) -> str:
        return self._transfers.upload_from_stream(scope, source, name, content_type, parent_id)

    # Workspace documents

    def export_document(
        self,
        scope: CancelScope,
        file_id: str,
        sink: IO[bytes],
        export_format: ExportFormat | str,
    ) -> int:
        return self._transfers.export_document(scope, file_id, sink, export_format)

    def export_document_to_path(
        self,
        scope: CancelScope,
        file_id: str,
        local_path: str | Path,
        export_format: ExportFormat | str,
    ) -> int:
        return self._transfers.export_document_to_path(scope, file_id, local_path, export_format)

    def get_export_links(self, scope: CancelScope, file_id: str) -> dict[str, str]:
        return self._transfers.get_export_links(scope, file_id)

    def is_workspace_document(self, scope: CancelScope, file_id: str) -> bool:
        return self._transfers.is_workspace_document(scope, file_id)

    # Mutations

    def create_folder(self, scope: CancelScope, name: str, parent_id: str = "") -> str:
        return self._mutations.create_folder(scope, name, parent_id)

    def trash_file(self, scope: CancelScope, file_id: str) -> None:
        self._mutations.trash(scope, file_id)

    def restore_file(self, scope: CancelScope, file_id: str) -> None:
        self._mutations.restore(scope, file_id)

    def delete_file(self, scope: CancelScope, file_id: str) -> None:
        self._mutations.delete_permanently(scope, file_id)


def drive_storage_from_config(config: AppConfig) -> DriveStorage:
    """Construct a DriveStorage from application configuration.

    Loads credentials, creates one DriveClient and wires every component
    to it.

    Args:
        config: Application configuration instance.

    Returns:
        Configured DriveStorage instance.
    """
    client = drive_client_from_config(config)
    logger.info("[drive_storage_from_config] drive storage ready; auth_mode:%s", config.auth_mode)
    return DriveStorage(
        client=client,
        lister=file_lister_from_config(client, config),
        transfers=transfer_engine_from_config(client, config),
        mutations=DriveMutations(client),
    )
