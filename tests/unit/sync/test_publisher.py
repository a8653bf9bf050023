"""Tests for archive publishing."""

import io
import tarfile

import pytest

from gitrieve.core.exceptions import ArchiveError, StorageError
from gitrieve.storage.file import FileStorage
from gitrieve.sync.publisher import ArchivePublisher, build_archive


@pytest.fixture
def source_dir(tmp_path):
    source = tmp_path / "source"
    (source / "nested").mkdir(parents=True)
    (source / "README.md").write_text("hello")
    (source / "nested" / "file.txt").write_text("nested")
    return source


def _names(archive: bytes) -> set[str]:
    with tarfile.open(fileobj=io.BytesIO(archive), mode="r:gz") as tar:
        return set(tar.getnames())


class RecordingStorage(FileStorage):
    def __init__(self, root, name):
        super().__init__(root, name)
        self.puts = []

    def put(self, key, data):
        self.puts.append(key)
        super().put(key, data)


class FailingStorage(FileStorage):
    def put(self, key, data):
        raise StorageError(f"disk full: {key}", details={"storage": self.name})


@pytest.mark.unit
class TestBuildArchive:
    """Tests for build_archive."""

    def test_entries_are_rooted_at_arcname(self, source_dir):
        names = _names(build_archive(source_dir, "code"))
        assert names == {"code", "code/README.md", "code/nested", "code/nested/file.txt"}

    def test_missing_source(self, tmp_path):
        with pytest.raises(ArchiveError):
            build_archive(tmp_path / "missing", "code")


@pytest.mark.unit
class TestArchivePublisher:
    """Tests for ArchivePublisher."""

    def test_unchanged_is_a_no_op(self, tmp_path):
        storage = RecordingStorage(tmp_path / "backup", "local")

        # The source does not even need to exist
        published = ArchivePublisher([storage]).publish(tmp_path / "missing", "code", "a.tar.gz", False)

        assert published is False
        assert storage.puts == []

    def test_fans_out_to_every_backend(self, tmp_path, source_dir):
        first = RecordingStorage(tmp_path / "one", "one")
        second = RecordingStorage(tmp_path / "two", "two")

        published = ArchivePublisher([first, second]).publish(
            source_dir, "code", "github.com/octo/demo/demo.tar.gz", True
        )

        assert published is True
        assert first.puts == second.puts == ["github.com/octo/demo/demo.tar.gz"]
        assert (
            first.get("github.com/octo/demo/demo.tar.gz").content
            == second.get("github.com/octo/demo/demo.tar.gz").content
        )

    def test_put_failure_stops_remaining_targets(self, tmp_path, source_dir):
        first = RecordingStorage(tmp_path / "one", "one")
        broken = FailingStorage(tmp_path / "two", "two")
        last = RecordingStorage(tmp_path / "three", "three")

        with pytest.raises(StorageError):
            ArchivePublisher([first, broken, last]).publish(source_dir, "code", "demo.tar.gz", True)

        # Targets written before the failure keep their archive
        assert first.puts == ["demo.tar.gz"]
        assert first.get("demo.tar.gz").content
        assert last.puts == []
