"""Unit tests for drive/models.py."""

import pytest

from gdrive_client.drive.errors import DriveValidationError
from gdrive_client.drive.models import ByteRange, ExportFormat, is_folder, parse_size


class TestByteRange:
    def test_header_and_length(self) -> None:
        byte_range = ByteRange(0, 1023)
        assert byte_range.header_value == "bytes=0-1023"
        assert byte_range.length == 1024

    def test_single_byte(self) -> None:
        assert ByteRange(7, 7).length == 1

    def test_start_after_end_is_rejected(self) -> None:
        with pytest.raises(DriveValidationError, match="less than or equal") as exc_info:
            ByteRange(100, 50)
        assert exc_info.value.field == "byte_range"

    @pytest.mark.parametrize(("start", "end"), [(-1, 10), (0, -1)])
    def test_negative_positions_are_rejected(self, start: int, end: int) -> None:
        with pytest.raises(DriveValidationError, match="negative"):
            ByteRange(start, end)

    def test_validation_error_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            ByteRange(5, 1)


class TestExportFormat:
    def test_values_are_mime_types(self) -> None:
        assert ExportFormat.PDF.value == "application/pdf"
        assert ExportFormat.CSV.value == "text/csv"
        assert ExportFormat.XLSX.value.endswith("spreadsheetml.sheet")

    def test_members_compare_equal_to_strings(self) -> None:
        assert ExportFormat.PNG == "image/png"

    def test_all_formats_present(self) -> None:
        assert {f.name for f in ExportFormat} == {
            "PDF", "DOCX", "XLSX", "PPTX", "ODT", "ODS", "ODP", "RTF",
            "TXT", "HTML", "ZIP", "JPEG", "PNG", "SVG", "CSV", "EPUB",
        }  # fmt: skip


class TestParseSize:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ({"size": "2048"}, 2048),
            ({"size": 10}, 10),
            ({}, 0),
            ({"size": ""}, 0),
            ({"size": "abc"}, 0),
        ],
    )
    def test_parse_size(self, raw: dict[str, object], expected: int) -> None:
        assert parse_size(raw) == expected


def test_is_folder() -> None:
    assert is_folder({"mimeType": "application/vnd.google-apps.folder"}) is True
    assert is_folder({"mimeType": "application/pdf"}) is False
    assert is_folder({}) is False
