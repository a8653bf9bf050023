"""Tests for working directory allocation."""

import pytest

from gitrieve.sync.workdir import WorkingDirectory


@pytest.mark.unit
class TestWorkingDirectory:
    """Tests for WorkingDirectory."""

    def test_temporary_directory_is_removed(self, tmp_path):
        workdir = WorkingDirectory(tmp_path / ".gitrieve", use_cache=False)

        with workdir as path:
            assert path.parent == (tmp_path / ".gitrieve").resolve()
            (path / "file.txt").write_text("x")

        assert not workdir.path.exists()

    def test_removed_even_on_failure(self, tmp_path):
        workdir = WorkingDirectory(tmp_path / ".gitrieve")

        with pytest.raises(RuntimeError):
            with workdir:
                raise RuntimeError("boom")

        assert not workdir.path.exists()

    def test_each_run_gets_a_fresh_path(self, tmp_path):
        first = WorkingDirectory(tmp_path)
        second = WorkingDirectory(tmp_path)
        assert first.path != second.path

    def test_cached_directory_persists(self, tmp_path):
        workdir = WorkingDirectory(tmp_path / ".gitrieve", use_cache=True)

        with workdir as path:
            (path / "file.txt").write_text("x")

        assert workdir.path == (tmp_path / ".gitrieve").resolve()
        assert (workdir.path / "file.txt").exists()
