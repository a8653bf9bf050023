"""Synchronization engines: working directories, change tracking, publishing, retention."""

from gitrieve.sync.publisher import ArchivePublisher, build_archive
from gitrieve.sync.retention import ReleaseRetentionEngine, RetentionResult, select_releases
from gitrieve.sync.tracker import compute_watermark, is_newer, query_since
from gitrieve.sync.workdir import WorkingDirectory

__all__ = [
    "ArchivePublisher",
    "ReleaseRetentionEngine",
    "RetentionResult",
    "WorkingDirectory",
    "build_archive",
    "compute_watermark",
    "is_newer",
    "query_since",
    "select_releases",
]
