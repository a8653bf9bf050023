"""Repository synchronization service.

Drives one sync kind (code, wiki, issues, discussions, releases, or a
timestamped full dump) for one repository, and runs a kind across every
configured repository, logging failures and moving on.
"""

from collections.abc import Callable
from datetime import datetime
from enum import Enum
from pathlib import Path

import structlog

from gitrieve.core.exceptions import ConfigurationError, GitrieveError, WorkspaceError
from gitrieve.core.models.repository import (
    AppConfig,
    RemoteIdentity,
    RepositoryDescriptor,
    RepositoryType,
)
from gitrieve.git.identity import resolve_identity
from gitrieve.git.reconciler import BranchReconciler
from gitrieve.remote.base import RemoteClient
from gitrieve.storage.base import StorageBackend
from gitrieve.storage.factory import StorageFactory
from gitrieve.storage.file import create_dir_if_not_exist
from gitrieve.sync.publisher import ArchivePublisher
from gitrieve.sync.render import (
    discussion_filename,
    issue_filename,
    render_discussion,
    render_issue,
)
from gitrieve.sync.retention import ReleaseRetentionEngine
from gitrieve.sync.tracker import compute_watermark, is_newer, query_since
from gitrieve.sync.workdir import WorkingDirectory

logger = structlog.get_logger(__name__)

DUMP_TIME_FORMAT = "%Y%m%d%H%M%S"


class SyncKind(str, Enum):
    """Content kinds that can be synchronized."""

    CODE = "code"
    WIKI = "wiki"
    ISSUES = "issues"
    DISCUSSIONS = "discussions"
    RELEASES = "releases"
    DUMP = "dump"


def default_clone_url(identity: RemoteIdentity, wiki: bool) -> str:
    return identity.clone_url(wiki=wiki)


def _prepare_items_dir(directory: Path) -> None:
    try:
        create_dir_if_not_exist(directory)
    except OSError as e:
        raise WorkspaceError(
            f"Cannot create item directory {directory}: {e}", details={"path": str(directory)}
        ) from e


def _write_item(path: Path, content: str) -> None:
    try:
        path.write_text(content, encoding="utf-8")
    except OSError as e:
        raise WorkspaceError(f"Cannot write item file {path}: {e}", details={"path": str(path)}) from e


class SyncService:
    """Synchronizes configured repositories into their storage targets."""

    def __init__(
        self,
        config: AppConfig,
        client: RemoteClient,
        work_dir: str | Path = ".gitrieve",
        storage_factory: StorageFactory | None = None,
        clone_url: Callable[[RemoteIdentity, bool], str] = default_clone_url,
    ) -> None:
        self._config = config
        self._client = client
        self._work_dir = Path(work_dir)
        self._storage_factory = storage_factory or StorageFactory()
        self._clone_url = clone_url

    # --- resolution ------------------------------------------------------

    def get_repositories(self, name: str = "") -> list[RepositoryDescriptor]:
        """Configured repositories matching ``name`` (all when empty).

        User and organization entries expand into one descriptor per
        repository they own, inheriting the entry's schedule and flags.
        """
        repositories: list[RepositoryDescriptor] = []
        for repo in self._config.repository:
            if name and repo.name != name:
                continue
            if repo.type == RepositoryType.REPO:
                repositories.append(repo)
                continue
            try:
                urls = self._client.list_owner_repositories(repo.org_name, repo.type)
            except GitrieveError as e:
                logger.error("Failed to list owner repositories", owner=repo.org_name, error=e.message)
                continue
            for url in urls:
                repositories.append(
                    repo.model_copy(
                        update={"name": url.rsplit("/", 1)[-1], "url": url, "type": RepositoryType.REPO}
                    )
                )
        return repositories

    def resolve_storages(
        self, repo: RepositoryDescriptor, storage_name: str = ""
    ) -> list[StorageBackend]:
        """Backends to publish ``repo`` to.

        An explicit ``storage_name`` selects that single target. Otherwise the
        repository's own storage names are used, or every configured storage
        when it names none.
        """
        storage_map = self._config.storage_map()
        if storage_name:
            names = [storage_name]
        else:
            names = repo.storage or list(storage_map)

        backends = []
        for storage in names:
            if storage not in storage_map:
                raise ConfigurationError(
                    f"Storage {storage} not found in config",
                    details={"repository": repo.name, "storage": storage},
                )
            backends.append(self._storage_factory.get_backend(storage_map[storage]))
        return backends

    # --- per-kind operations ---------------------------------------------

    def sync_code(self, repo: RepositoryDescriptor, backends: list[StorageBackend], wiki: bool = False) -> bool:
        """Mirror the code (or wiki) git repository and publish a snapshot."""
        identity = resolve_identity(repo.url)
        kind = "wiki" if wiki else "code"
        with WorkingDirectory(self._work_dir, repo.use_cache) as work:
            git_dir = work / identity.namespace(kind)
            reconciler = BranchReconciler(
                clone_url=self._clone_url(identity, wiki),
                git_dir=git_dir,
                all_branches=repo.all_branches,
                depth=repo.depth,
            )
            result = reconciler.reconcile()

            # Snapshots fully supersede the previous one; no timestamp
            artifact = f"{identity.name}_wiki.tar.gz" if wiki else f"{identity.name}.tar.gz"
            return ArchivePublisher(backends).publish(
                git_dir, kind, identity.namespace(artifact), result.updated
            )

    def sync_wiki(self, repo: RepositoryDescriptor, backends: list[StorageBackend]) -> bool:
        identity = resolve_identity(repo.url)
        if not self._client.has_wiki(identity.owner, identity.name):
            logger.warning("Repository has no wiki", repository=str(identity))
            return False
        return self.sync_code(repo, backends, wiki=True)

    def sync_issues(self, repo: RepositoryDescriptor, backends: list[StorageBackend]) -> bool:
        """Fetch issues updated since the watermark and publish the issue set."""
        identity = resolve_identity(repo.url)
        with WorkingDirectory(self._work_dir, repo.use_cache) as work:
            items_dir = work / identity.namespace("issues")
            _prepare_items_dir(items_dir)
            watermark = compute_watermark(items_dir)

            changed = False
            issues = self._client.iter_issues(identity.owner, identity.name, query_since(watermark))
            for issue in issues:
                # Comments are drained before the next page of issues is requested
                comments = list(
                    self._client.iter_issue_comments(identity.owner, identity.name, issue.number)
                )
                issue = issue.model_copy(update={"comments": comments})
                _write_item(items_dir / issue_filename(issue), render_issue(issue))
                changed = True
                logger.debug("Issue written", repository=str(identity), number=issue.number)

            return ArchivePublisher(backends).publish(
                items_dir, "issues", identity.namespace("issues.tar.gz"), changed
            )

    def sync_discussions(self, repo: RepositoryDescriptor, backends: list[StorageBackend]) -> bool:
        """Fetch discussions updated after the watermark, with comments and replies.

        Relies on the client listing discussions most recently updated first.
        """
        identity = resolve_identity(repo.url)
        with WorkingDirectory(self._work_dir, repo.use_cache) as work:
            items_dir = work / identity.namespace("discussion")
            _prepare_items_dir(items_dir)
            watermark = compute_watermark(items_dir)

            changed = False
            for discussion in self._client.iter_discussions(identity.owner, identity.name):
                if not is_newer(discussion.updated_at, watermark):
                    # Listed newest first; everything after this one is older still
                    break
                comments = []
                for comment in self._client.iter_discussion_comments(
                    identity.owner, identity.name, discussion.number
                ):
                    replies = list(self._client.iter_comment_replies(comment))
                    comments.append(comment.model_copy(update={"replies": replies}))
                discussion = discussion.model_copy(update={"comments": comments})
                _write_item(items_dir / discussion_filename(discussion), render_discussion(discussion))
                changed = True
                logger.debug("Discussion written", repository=str(identity), number=discussion.number)

            return ArchivePublisher(backends).publish(
                items_dir, "discussion", identity.namespace("discussions.tar.gz"), changed
            )

    def sync_releases(self, repo: RepositoryDescriptor, backends: list[StorageBackend]) -> bool:
        identity = resolve_identity(repo.url)
        engine = ReleaseRetentionEngine(
            client=self._client,
            backends=backends,
            count_limit=self._config.release_num_limit,
            size_limit=self._config.release_size_limit,
        )
        result = engine.run(identity)
        return bool(result.downloaded or result.evicted)

    def dump_repository(self, repo: RepositoryDescriptor, backends: list[StorageBackend]) -> bool:
        """Full dump into a timestamped archive, so successive runs accumulate."""
        identity = resolve_identity(repo.url)
        with WorkingDirectory(self._work_dir, repo.use_cache) as work:
            git_dir = work / identity.name
            result = BranchReconciler(
                clone_url=self._clone_url(identity, False),
                git_dir=git_dir,
                all_branches=repo.all_branches,
                depth=repo.depth,
            ).reconcile()
            artifact = f"{repo.name}-{datetime.now().strftime(DUMP_TIME_FORMAT)}.tar.gz"
            return ArchivePublisher(backends).publish(git_dir, repo.name, artifact, result.updated)

    # --- runners ---------------------------------------------------------

    def sync(self, kind: SyncKind, repo: RepositoryDescriptor, backends: list[StorageBackend]) -> bool:
        handlers = {
            SyncKind.CODE: self.sync_code,
            SyncKind.WIKI: self.sync_wiki,
            SyncKind.ISSUES: self.sync_issues,
            SyncKind.DISCUSSIONS: self.sync_discussions,
            SyncKind.RELEASES: self.sync_releases,
            SyncKind.DUMP: self.dump_repository,
        }
        return handlers[kind](repo, backends)

    def sync_one(
        self, kind: SyncKind, repo: RepositoryDescriptor, backends: list[StorageBackend]
    ) -> bool:
        """Run one sync step, logging instead of raising on failure.

        Returns True when the step completed.
        """
        log = logger.bind(repository=repo.name, kind=kind.value)
        log.info("Running sync")
        try:
            published = self.sync(kind, repo, backends)
        except GitrieveError as e:
            log.error("Sync failed", error=e.message, **e.details)
            return False
        log.info("Sync finished", published=published)
        return True

    def run(self, kind: SyncKind, name: str = "", storage_name: str = "") -> dict[str, bool]:
        """Sync ``kind`` for every matching repository; one failure never stops the rest."""
        results: dict[str, bool] = {}
        repositories = self.get_repositories(name)
        if not repositories:
            logger.warning("No repository matched", name=name or "*")
        for repo in repositories:
            try:
                backends = self.resolve_storages(repo, storage_name)
            except ConfigurationError as e:
                logger.error("Invalid repository configuration", repository=repo.name, error=e.message)
                results[repo.name] = False
                continue
            results[repo.name] = self.sync_one(kind, repo, backends)
        return results
