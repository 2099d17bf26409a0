"""Unit tests for drive/mutations.py — folder creation and trash lifecycle."""

from unittest.mock import MagicMock

import pytest

from gdrive_client.drive.cancel import CancelScope
from gdrive_client.drive.errors import DriveApiError, DriveValidationError
from gdrive_client.drive.mutations import DriveMutations


def _make_mutations(result: object = None) -> tuple[DriveMutations, MagicMock]:
    mock_client = MagicMock()
    if isinstance(result, Exception):
        mock_client.request_json.side_effect = result
    else:
        mock_client.request_json.return_value = result if result is not None else {}
    return DriveMutations(mock_client), mock_client


class TestCreateFolder:
    def test_creates_in_root(self) -> None:
        mutations, mock_client = _make_mutations({"id": "fold-1", "name": "Reports"})
        scope = CancelScope()

        folder_id = mutations.create_folder(scope, "Reports")

        assert folder_id == "fold-1"
        mock_client.request_json.assert_called_once_with(
            scope,
            "POST",
            "/files",
            operation="unable to create folder",
            params={"fields": "id, name"},
            body={"name": "Reports", "mimeType": "application/vnd.google-apps.folder"},
        )

    def test_creates_under_parent(self) -> None:
        mutations, mock_client = _make_mutations({"id": "fold-2"})

        mutations.create_folder(CancelScope(), "2024", parent_id="fold-1")

        body = mock_client.request_json.call_args.kwargs["body"]
        assert body["parents"] == ["fold-1"]

    def test_empty_name_is_rejected(self) -> None:
        mutations, mock_client = _make_mutations()

        with pytest.raises(DriveValidationError, match="folder name cannot be empty"):
            mutations.create_folder(CancelScope(), "")
        mock_client.request_json.assert_not_called()


class TestTrashLifecycle:
    def test_trash_sets_trashed_flag(self) -> None:
        mutations, mock_client = _make_mutations()

        mutations.trash(CancelScope(), "file-1")

        args = mock_client.request_json.call_args
        assert args.args[1:] == ("PATCH", "/files/file-1")
        assert args.kwargs["body"] == {"trashed": True}
        assert args.kwargs["operation"] == "unable to trash file"

    def test_restore_clears_trashed_flag(self) -> None:
        mutations, mock_client = _make_mutations()

        mutations.restore(CancelScope(), "file-1")

        args = mock_client.request_json.call_args
        assert args.kwargs["body"] == {"trashed": False}
        assert args.kwargs["operation"] == "unable to restore file"

    def test_delete_permanently(self) -> None:
        mutations, mock_client = _make_mutations()

        mutations.delete_permanently(CancelScope(), "file-1")

        args = mock_client.request_json.call_args
        assert args.args[1:] == ("DELETE", "/files/file-1")
        assert args.kwargs["operation"] == "unable to delete file permanently"

    def test_file_id_is_url_quoted(self) -> None:
        mutations, mock_client = _make_mutations()

        mutations.trash(CancelScope(), "a/b c")

        assert mock_client.request_json.call_args.args[2] == "/files/a%2Fb%20c"

    @pytest.mark.parametrize("method", ["trash", "restore", "delete_permanently"])
    def test_empty_id_is_rejected(self, method: str) -> None:
        mutations, mock_client = _make_mutations()

        with pytest.raises(DriveValidationError, match="file ID cannot be empty"):
            getattr(mutations, method)(CancelScope(), "")
        mock_client.request_json.assert_not_called()

    def test_api_error_propagates(self) -> None:
        mutations, _ = _make_mutations(DriveApiError(404, "File not found", reason="notFound"))

        with pytest.raises(DriveApiError):
            mutations.delete_permanently(CancelScope(), "missing")
