"""Tests for the filesystem storage backend."""

import pytest

from gitrieve.core.exceptions import ObjectNotFoundError, StorageError


@pytest.mark.unit
class TestFileStorage:
    """Tests for FileStorage."""

    def test_put_and_get(self, file_storage):
        file_storage.put("github.com/octo/demo/demo.tar.gz", b"data")

        stored = file_storage.get("github.com/octo/demo/demo.tar.gz")
        assert stored.content == b"data"
        assert stored.meta.size == 4
        assert (file_storage.root / "github.com/octo/demo/demo.tar.gz").is_file()

    def test_put_overwrites(self, file_storage):
        file_storage.put("a/b.bin", b"old")
        file_storage.put("a/b.bin", b"newer")
        assert file_storage.get("a/b.bin").content == b"newer"

    def test_list_meta_of_file(self, file_storage):
        file_storage.put("a/b.bin", b"12345")

        [meta] = file_storage.list_meta("a/b.bin")
        assert meta.path == "a/b.bin"
        assert meta.size == 5

    def test_list_meta_of_directory(self, file_storage):
        file_storage.put("rel/v2/x.zip", b"x")
        file_storage.put("rel/v1/y.zip", b"y")

        paths = [meta.path for meta in file_storage.list_meta("rel")]
        assert paths == ["rel/v1", "rel/v2"]

    def test_list_meta_missing(self, file_storage):
        with pytest.raises(ObjectNotFoundError):
            file_storage.list_meta("nothing/here")

    def test_get_missing(self, file_storage):
        with pytest.raises(ObjectNotFoundError):
            file_storage.get("missing.bin")

    def test_delete_directory_recursively(self, file_storage):
        file_storage.put("rel/v1/a.zip", b"a")
        file_storage.put("rel/v1/nested/b.zip", b"b")

        file_storage.delete("rel/v1")

        with pytest.raises(ObjectNotFoundError):
            file_storage.list_meta("rel/v1")

    def test_delete_missing(self, file_storage):
        with pytest.raises(ObjectNotFoundError):
            file_storage.delete("missing")

    @pytest.mark.parametrize("key", ["", "../outside.bin"])
    def test_rejects_invalid_keys(self, file_storage, key):
        with pytest.raises(StorageError):
            file_storage.put(key, b"x")
