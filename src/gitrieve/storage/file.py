"""Local filesystem storage backend."""

import os
import shutil
from datetime import datetime, timezone
from pathlib import Path

import structlog

from gitrieve.core.exceptions import ObjectNotFoundError, StorageError
from gitrieve.core.models.storage import ObjectMetaInfo, StoredObject
from gitrieve.storage.base import StorageBackend

logger = structlog.get_logger(__name__)

DIR_MODE = 0o774
FILE_MODE = 0o664


def create_dir_if_not_exist(directory: Path) -> None:
    """Create ``directory`` (and parents) with group-writable permissions."""
    if directory.exists():
        return
    directory.mkdir(mode=DIR_MODE, parents=True, exist_ok=True)
    # mkdir applies the umask; force the intended mode
    os.chmod(directory, DIR_MODE)


class FileStorage(StorageBackend):
    """Stores objects as files under a root directory.

    A relative root is resolved against the process working directory
    once, at construction time.
    """

    def __init__(self, root: str | Path, name: str = "file") -> None:
        self.name = name
        self._root = Path(root or ".").resolve()

    @property
    def root(self) -> Path:
        return self._root

    def _path(self, key: str) -> Path:
        if not key:
            raise StorageError("Invalid key: key cannot be empty", details={"storage": self.name})
        path = (self._root / key).resolve()
        if path != self._root and self._root not in path.parents:
            raise StorageError(
                f"Key escapes storage root: {key}", details={"storage": self.name, "key": key}
            )
        return path

    @staticmethod
    def _meta(key: str, path: Path) -> ObjectMetaInfo:
        stat = path.stat()
        return ObjectMetaInfo(
            path=key,
            size=stat.st_size,
            last_modified=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
        )

    def list_meta(self, prefix: str) -> list[ObjectMetaInfo]:
        path = self._path(prefix)
        if not path.exists():
            raise ObjectNotFoundError(
                f"Prefix does not exist: {prefix}", details={"storage": self.name, "prefix": prefix}
            )
        if path.is_file():
            return [self._meta(prefix, path)]
        prefix = prefix.rstrip("/")
        return [
            self._meta(f"{prefix}/{entry.name}", entry)
            for entry in sorted(path.iterdir(), key=lambda p: p.name)
        ]

    def get(self, key: str) -> StoredObject:
        path = self._path(key)
        if not path.exists():
            raise ObjectNotFoundError(
                f"Object does not exist: {key}", details={"storage": self.name, "key": key}
            )
        if path.is_dir():
            raise StorageError(
                f"Key points to a directory, not a file: {key}",
                details={"storage": self.name, "key": key},
            )
        return StoredObject(meta=self._meta(key, path), content=path.read_bytes())

    def put(self, key: str, data: bytes) -> None:
        path = self._path(key)
        try:
            create_dir_if_not_exist(path.parent)
            path.write_bytes(data)
            os.chmod(path, FILE_MODE)
        except OSError as e:
            raise StorageError(
                f"Failed to write {key}: {e}", details={"storage": self.name, "key": key}
            ) from e
        logger.debug("Object stored", storage=self.name, key=key, size=len(data))

    def delete(self, key: str) -> None:
        path = self._path(key)
        if not path.exists():
            raise ObjectNotFoundError(
                f"Object does not exist: {key}", details={"storage": self.name, "key": key}
            )
        try:
            if path.is_dir():
                shutil.rmtree(path)
            else:
                path.unlink()
        except OSError as e:
            raise StorageError(
                f"Failed to delete {key}: {e}", details={"storage": self.name, "key": key}
            ) from e
