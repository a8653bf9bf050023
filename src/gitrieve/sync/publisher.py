"""Archive-and-fan-out publishing."""

import io
import tarfile
from pathlib import Path

import structlog

from gitrieve.core.exceptions import ArchiveError
from gitrieve.storage.base import StorageBackend

logger = structlog.get_logger(__name__)


def build_archive(source_dir: Path, arcname: str) -> bytes:
    """Pack ``source_dir`` into a gzip tarball rooted at ``arcname/``.

    Paths are taken relative to the explicit source directory; the
    process working directory is never touched.
    """
    if not source_dir.is_dir():
        raise ArchiveError(
            f"Source directory does not exist: {source_dir}", details={"source": str(source_dir)}
        )
    buffer = io.BytesIO()
    try:
        with tarfile.open(fileobj=buffer, mode="w:gz") as tar:
            tar.add(str(source_dir), arcname=arcname)
    except (OSError, tarfile.TarError) as e:
        raise ArchiveError(
            f"Failed to archive {source_dir}: {e}", details={"source": str(source_dir)}
        ) from e
    return buffer.getvalue()


class ArchivePublisher:
    """Writes one archive to every storage target."""

    def __init__(self, backends: list[StorageBackend]) -> None:
        self._backends = backends

    def publish(self, source_dir: Path, arcname: str, key: str, changed: bool) -> bool:
        """Archive ``source_dir`` and store it at ``key`` on every backend.

        Does nothing (no archive, no storage call) when ``changed`` is
        false. The first storage failure aborts the remaining fan-out;
        targets already written are left as they are.
        """
        if not changed:
            logger.info("All is up to date, nothing to publish", key=key)
            return False

        archive = build_archive(source_dir, arcname)
        for backend in self._backends:
            backend.put(key, archive)
            logger.info("Archive stored", storage=backend.name, key=key, size=len(archive))
        return True
