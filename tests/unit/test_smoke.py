"""Smoke tests — validate the package wires together end-to-end."""

import io
from unittest.mock import MagicMock, patch

import gdrive_client
from gdrive_client.config import AppConfig
from gdrive_client.drive.cancel import CancelScope


def _response(status: int, json_body: dict[str, object] | None = None) -> MagicMock:
    response = MagicMock()
    response.status_code = status
    response.content = b"{}"
    response.json.return_value = json_body or {}
    response.iter_content.side_effect = lambda chunk_size=1: iter([b"hello"])
    return response


def test_version() -> None:
    assert gdrive_client.__version__ == "0.1.0"


def test_list_and_download_through_storage() -> None:
    """Storage lists files and streams one through a patched authorized session."""
    from gdrive_client.orchestration.storage import drive_storage_from_config

    session = MagicMock()
    session.request.side_effect = [
        _response(200, {"files": [{"id": "fold", "name": "Docs"}]}),
        _response(
            200,
            {
                "files": [
                    {
                        "id": "f1",
                        "name": "a.txt",
                        "mimeType": "text/plain",
                        "size": "5",
                        "parents": ["fold"],
                    }
                ]
            },
        ),
        _response(200),
    ]
    config = AppConfig(auth_mode="service_account", credentials_file="key.json")

    with (
        patch("gdrive_client.drive.client.credentials_from_config"),
        patch("gdrive_client.drive.client.AuthorizedSession", return_value=session),
    ):
        storage = drive_storage_from_config(config)

    with storage:
        scope = CancelScope(timeout=30)
        [record] = storage.list_files(scope)
        sink = io.BytesIO()
        written = storage.stream_file(scope, record.id, sink)

    assert record.folder_path == "My Drive/Docs"
    assert written == 5
    assert sink.getvalue() == b"hello"
    session.close.assert_called_once()
