"""Tests for watermark tracking."""

from datetime import datetime, timezone

import pytest

from gitrieve.core.exceptions import WorkspaceError
from gitrieve.sync.tracker import (
    EPOCH,
    compute_watermark,
    format_timestamp,
    is_newer,
    parse_updated_time,
    query_since,
)


def _utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


@pytest.mark.unit
class TestWatermark:
    """Tests for compute_watermark and friends."""

    def test_missing_directory(self, tmp_path):
        assert compute_watermark(tmp_path / "missing") == EPOCH

    def test_empty_directory(self, tmp_path):
        assert compute_watermark(tmp_path) == EPOCH

    def test_newest_marker_wins(self, tmp_path):
        (tmp_path / "#1.md").write_text("- Updated Time: 2024-01-01 10:00:00\n")
        (tmp_path / "#2.md").write_text("- Updated Time: 2024-03-01 08:30:15\n")
        (tmp_path / "#3.md").write_text("- Updated Time: 2023-12-31 23:59:59\n")

        assert compute_watermark(tmp_path) == _utc(2024, 3, 1, 8, 30, 15)

    def test_files_without_marker_are_ignored(self, tmp_path):
        (tmp_path / "#1.md").write_text("# no marker here\n")
        (tmp_path / "#2.md").write_text("- Updated Time: not a date\n")

        assert compute_watermark(tmp_path) == EPOCH

    def test_first_marker_in_file_is_used(self, tmp_path):
        (tmp_path / "#1.md").write_text(
            "- Updated Time: 2024-01-01 00:00:00\n"
            "### Comment\n"
            "- Updated Time: 2025-01-01 00:00:00\n"
        )
        assert compute_watermark(tmp_path) == _utc(2024, 1, 1)

    def test_non_item_files_are_ignored(self, tmp_path):
        (tmp_path / "notes.txt").write_text("- Updated Time: 2030-01-01 00:00:00\n")
        assert compute_watermark(tmp_path) == EPOCH

    def test_undecodable_item_file(self, tmp_path):
        (tmp_path / "#1.md").write_bytes(b"\xff\xfe\x00 not utf-8")

        with pytest.raises(WorkspaceError):
            compute_watermark(tmp_path)


@pytest.mark.unit
class TestTimestamps:
    """Tests for timestamp helpers."""

    def test_format_converts_to_utc(self):
        value = datetime.fromisoformat("2024-05-01T12:00:00+02:00")
        assert format_timestamp(value) == "2024-05-01 10:00:00"

    def test_format_parse_agree(self):
        value = _utc(2024, 5, 1, 10, 0, 0)
        assert parse_updated_time(f"- Updated Time: {format_timestamp(value)}") == value

    def test_query_since_adds_one_second(self):
        assert query_since(_utc(2024, 1, 1)) == _utc(2024, 1, 1, 0, 0, 1)

    def test_is_newer_is_strict(self):
        watermark = _utc(2024, 1, 1)
        assert is_newer(_utc(2024, 1, 1, 0, 0, 1), watermark)
        assert not is_newer(watermark, watermark)
        assert not is_newer(_utc(2023, 1, 1), watermark)

