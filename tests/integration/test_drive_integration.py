"""Integration tests for Google Drive API connectivity.

These tests require real credentials and are skipped in CI/CD unless the
GDC_CREDENTIALS_FILE environment variable is set. They create a scratch
folder, upload into it, read the content back and delete the folder.
"""

import io
import os
import uuid

import pytest

pytestmark = pytest.mark.skipif(
    not os.getenv("GDC_CREDENTIALS_FILE"),
    reason="Real Drive credentials not available",
)


def test_list_files_real() -> None:
    """Enumerate the drive; every record has a resolved path under the root."""
    from gdrive_client.config import load_config
    from gdrive_client.drive.cancel import CancelScope
    from gdrive_client.orchestration.storage import drive_storage_from_config

    config = load_config()
    with drive_storage_from_config(config) as storage:
        records = storage.list_files(CancelScope(timeout=120))

    assert isinstance(records, list)
    for record in records:
        assert record.folder_path.startswith(config.root_path)
        assert record.size > 0


def test_upload_download_roundtrip_real() -> None:
    """Upload a small file into a scratch folder, read it back, then clean up."""
    from gdrive_client.config import load_config
    from gdrive_client.drive.cancel import CancelScope
    from gdrive_client.drive.models import ByteRange
    from gdrive_client.orchestration.storage import drive_storage_from_config

    payload = b"gdrive-client integration " + uuid.uuid4().hex.encode()
    with drive_storage_from_config(load_config()) as storage:
        scope = CancelScope(timeout=120)
        folder_id = storage.create_folder(scope, f"gdc-it-{uuid.uuid4().hex[:8]}")
        try:
            file_id = storage.upload_from_stream(
                scope, io.BytesIO(payload), "probe.txt", "text/plain", folder_id
            )

            full = io.BytesIO()
            assert storage.stream_file(scope, file_id, full) == len(payload)
            assert full.getvalue() == payload

            part = io.BytesIO()
            storage.partial_download(scope, file_id, part, ByteRange(0, 9))
            assert part.getvalue() == payload[:10]

            assert storage.is_workspace_document(scope, file_id) is False
        finally:
            storage.delete_file(scope, folder_id)
