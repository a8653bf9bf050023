"""Release asset retention.

Keeps the most recent releases within a count limit and a cumulative
asset size budget, downloads only assets a target does not already hold
with the right size, and evicts release directories that fell out of the
retention window.
"""

from datetime import datetime, timezone
from pathlib import PurePosixPath

import structlog
from pydantic import BaseModel, Field

from gitrieve.core.exceptions import ObjectNotFoundError
from gitrieve.core.models.release import Release, ReleaseAsset
from gitrieve.core.models.repository import RemoteIdentity
from gitrieve.remote.base import RemoteClient
from gitrieve.storage.base import StorageBackend

logger = structlog.get_logger(__name__)

RELEASE_DIR = "release"
_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


class RetentionResult(BaseModel):
    """What one retention run kept, stored and deleted."""

    retained: list[str] = Field(default_factory=list)
    downloaded: list[str] = Field(default_factory=list)
    stored: dict[str, list[str]] = Field(default_factory=dict)
    evicted: dict[str, list[str]] = Field(default_factory=dict)


def select_releases(releases: list[Release], count_limit: int, size_limit: int) -> list[Release]:
    """Pick the releases inside the retention window.

    Most recent first; at most ``count_limit`` releases (negative means
    unbounded). Asset sizes accumulate across releases and no new release
    is started once the total reaches ``size_limit`` (negative means
    unbounded), so the most recent release is always kept and a release
    that crosses the budget is kept whole.
    """
    ordered = sorted(releases, key=lambda r: r.published_at or _OLDEST, reverse=True)
    if count_limit >= 0:
        ordered = ordered[:count_limit]

    selected = []
    total = 0
    for release in ordered:
        if size_limit >= 0 and total >= size_limit:
            logger.info("Release size limit reached", limit=size_limit, total=total)
            break
        selected.append(release)
        total += sum(asset.size for asset in release.eligible_assets)
    return selected


def asset_key(identity: RemoteIdentity, release: Release, asset: ReleaseAsset) -> str:
    return identity.namespace(RELEASE_DIR, release.tag_name, asset.name)


def _top_level_tag(tag_name: str) -> str:
    # Tags containing "/" nest directories; eviction looks at the first level
    return tag_name.split("/", 1)[0]


class ReleaseRetentionEngine:
    """Applies the retention window to every storage target."""

    def __init__(
        self,
        client: RemoteClient,
        backends: list[StorageBackend],
        count_limit: int,
        size_limit: int,
    ) -> None:
        self._client = client
        self._backends = backends
        self._count_limit = count_limit
        self._size_limit = size_limit

    def needs_download(self, backend: StorageBackend, key: str, asset: ReleaseAsset) -> bool:
        """True when ``backend`` lacks ``key`` or holds it with another size."""
        try:
            existing = backend.list_meta(key)
        except ObjectNotFoundError:
            return True
        return not existing or existing[0].size != asset.size

    def run(self, identity: RemoteIdentity) -> RetentionResult:
        releases = self._client.list_releases(identity.owner, identity.name)
        retained = select_releases(releases, self._count_limit, self._size_limit)
        result = RetentionResult(retained=[release.tag_name for release in retained])

        for release in retained:
            for asset in release.eligible_assets:
                key = asset_key(identity, release, asset)
                targets = [b for b in self._backends if self.needs_download(b, key, asset)]
                if not targets:
                    logger.debug("Asset already stored", key=key)
                    continue

                # One download, fanned out to every target that needs it
                data = self._client.download_asset(identity.owner, identity.name, asset)
                result.downloaded.append(key)
                for backend in targets:
                    backend.put(key, data)
                    result.stored.setdefault(backend.name, []).append(key)
                    logger.info("Asset stored", storage=backend.name, key=key, size=len(data))

        # Eviction only after every download has finished
        keep = {_top_level_tag(tag) for tag in result.retained}
        prefix = identity.namespace(RELEASE_DIR)
        for backend in self._backends:
            try:
                entries = backend.list_meta(prefix)
            except ObjectNotFoundError:
                continue
            for entry in entries:
                if PurePosixPath(entry.path).name in keep:
                    continue
                backend.delete(entry.path)
                result.evicted.setdefault(backend.name, []).append(entry.path)
                logger.info("Release evicted", storage=backend.name, key=entry.path)

        logger.info(
            "Release retention applied",
            repository=str(identity),
            retained=result.retained,
            downloaded=len(result.downloaded),
        )
        return result
