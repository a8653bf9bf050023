"""Remote hosting API contract.

The sync engine only depends on these operations; result sets are taken
as given. Listings are lazy iterators that fetch the next page only when
the previous one has been consumed.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterator
from datetime import datetime

from gitrieve.core.models.items import (
    Discussion,
    DiscussionComment,
    DiscussionReply,
    Issue,
    IssueComment,
)
from gitrieve.core.models.release import Release, ReleaseAsset
from gitrieve.core.models.repository import RepositoryType


class RemoteClient(ABC):
    """Operations the sync engine needs from a hosting service."""

    @abstractmethod
    def list_owner_repositories(self, owner: str, kind: RepositoryType) -> list[str]:
        """Return ``host/owner/name`` URLs of every repository a user or org owns."""

    @abstractmethod
    def has_wiki(self, owner: str, name: str) -> bool:
        """Whether the repository has its wiki enabled."""

    @abstractmethod
    def iter_issues(self, owner: str, name: str, since: datetime) -> Iterator[Issue]:
        """Issues updated at or after ``since`` (inclusive), oldest update first."""

    @abstractmethod
    def iter_issue_comments(self, owner: str, name: str, number: int) -> Iterator[IssueComment]:
        """All comments of one issue."""

    @abstractmethod
    def iter_discussions(self, owner: str, name: str) -> Iterator[Discussion]:
        """All discussions, most recently updated first, without comments."""

    @abstractmethod
    def iter_discussion_comments(
        self, owner: str, name: str, number: int
    ) -> Iterator[DiscussionComment]:
        """All top-level comments of one discussion, without replies."""

    @abstractmethod
    def iter_comment_replies(self, comment: DiscussionComment) -> Iterator[DiscussionReply]:
        """All replies under one discussion comment."""

    @abstractmethod
    def list_releases(self, owner: str, name: str) -> list[Release]:
        """Every release of the repository, including its asset listing."""

    @abstractmethod
    def download_asset(self, owner: str, name: str, asset: ReleaseAsset) -> bytes:
        """Download the content of one release asset."""
