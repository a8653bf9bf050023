"""Working directory lifecycle."""

import shutil
import uuid
from pathlib import Path

import structlog

from gitrieve.core.exceptions import WorkspaceError
from gitrieve.storage.file import create_dir_if_not_exist

logger = structlog.get_logger(__name__)


class WorkingDirectory:
    """Allocates the directory one sync invocation works in.

    With caching the path is the stable ``root`` and survives the run so
    the next one can work incrementally. Without caching every run gets a
    fresh ``root/<uuid>`` that is removed on exit, even when the sync fails.
    """

    def __init__(self, root: str | Path, use_cache: bool = False) -> None:
        self._root = Path(root).resolve()
        self._use_cache = use_cache
        if use_cache:
            self._path = self._root
        else:
            self._path = self._root / str(uuid.uuid4())

    @property
    def path(self) -> Path:
        return self._path

    @property
    def use_cache(self) -> bool:
        return self._use_cache

    def __enter__(self) -> Path:
        try:
            create_dir_if_not_exist(self._path)
        except OSError as e:
            raise WorkspaceError(
                f"Cannot create working directory {self._path}: {e}",
                details={"path": str(self._path)},
            ) from e
        return self._path

    def __exit__(self, exc_type, exc, tb) -> None:
        if self._use_cache:
            return
        try:
            shutil.rmtree(self._path)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.error("Failed to clean up working directory", path=str(self._path), error=str(e))
            if exc is None:
                raise WorkspaceError(
                    f"Cannot remove working directory {self._path}: {e}",
                    details={"path": str(self._path)},
                ) from e
        else:
            logger.debug("Working directory removed", path=str(self._path))
