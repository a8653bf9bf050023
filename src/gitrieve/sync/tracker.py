"""Incremental-change tracking for item content (issues, discussions).

Every persisted item file carries a line ``- Updated Time: YYYY-MM-DD HH:MM:SS``
(UTC). The newest of those timestamps is the watermark: only items updated
strictly after it are fetched on the next run.
"""

from datetime import datetime, timedelta, timezone
from pathlib import Path

import structlog

from gitrieve.core.exceptions import WorkspaceError

logger = structlog.get_logger(__name__)

UPDATED_TIME_PREFIX = "- Updated Time: "
TIME_FORMAT = "%Y-%m-%d %H:%M:%S"
EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
ITEM_SUFFIX = ".md"


def format_timestamp(value: datetime) -> str:
    """Format a timestamp the way item files store it (UTC, seconds)."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime(TIME_FORMAT)


def parse_updated_time(content: str) -> datetime | None:
    """Return the first parseable ``Updated Time`` marker in ``content``."""
    for line in content.splitlines():
        if not line.startswith(UPDATED_TIME_PREFIX):
            continue
        try:
            parsed = datetime.strptime(line[len(UPDATED_TIME_PREFIX):].strip(), TIME_FORMAT)
        except ValueError:
            continue
        return parsed.replace(tzinfo=timezone.utc)
    return None


def compute_watermark(directory: Path) -> datetime:
    """Newest ``Updated Time`` across the item files in ``directory``.

    A missing or empty directory, or one without any parseable marker,
    yields the Unix epoch so that everything is fetched.
    """
    watermark = EPOCH
    if not directory.is_dir():
        return watermark

    files = sorted(p for p in directory.iterdir() if p.is_file() and p.suffix == ITEM_SUFFIX)
    if not files:
        logger.info("No items downloaded yet, fetching everything", directory=str(directory))
        return watermark

    for path in files:
        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise WorkspaceError(
                f"Cannot read item file {path}: {e}", details={"path": str(path)}
            ) from e
        updated = parse_updated_time(content)
        if updated is not None and updated > watermark:
            watermark = updated

    logger.info("Watermark computed", directory=str(directory), watermark=format_timestamp(watermark))
    return watermark


def query_since(watermark: datetime) -> datetime:
    """Lower bound for APIs whose ``since`` filter is inclusive."""
    return watermark + timedelta(seconds=1)


def is_newer(updated_at: datetime, watermark: datetime) -> bool:
    """Strictly-after comparison; the watermark item itself is excluded."""
    if updated_at.tzinfo is None:
        updated_at = updated_at.replace(tzinfo=timezone.utc)
    return updated_at > watermark
