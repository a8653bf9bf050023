"""Pytest configuration and fixtures."""

import subprocess
from collections.abc import Iterator
from datetime import datetime
from pathlib import Path

import pytest

from gitrieve.core.models.items import (
    Discussion,
    DiscussionComment,
    DiscussionReply,
    Issue,
    IssueComment,
)
from gitrieve.core.models.release import Release, ReleaseAsset
from gitrieve.core.models.repository import RepositoryType
from gitrieve.remote.base import RemoteClient
from gitrieve.storage.file import FileStorage


def git(repo: Path, *args: str) -> str:
    """Run git in ``repo`` and return stdout."""
    result = subprocess.run(
        ["git", *args], cwd=repo, capture_output=True, text=True, check=True
    )
    return result.stdout.strip()


def commit_file(repo: Path, name: str, content: str, message: str | None = None) -> str:
    """Write ``name`` in ``repo``, commit it and return the new commit hash."""
    (repo / name).write_text(content)
    git(repo, "add", name)
    git(repo, "commit", "-m", message or f"Update {name}")
    return git(repo, "rev-parse", "HEAD")


@pytest.fixture
def upstream(tmp_path: Path) -> Path:
    """A remote repository with a single ``main`` branch and one commit."""
    repo_path = tmp_path / "upstream"
    repo_path.mkdir()

    git(repo_path, "init")
    git(repo_path, "symbolic-ref", "HEAD", "refs/heads/main")
    git(repo_path, "config", "user.email", "test@test.com")
    git(repo_path, "config", "user.name", "Test")
    commit_file(repo_path, "README.md", "# Upstream\n", "Initial commit")
    return repo_path


@pytest.fixture
def file_storage(tmp_path: Path) -> FileStorage:
    return FileStorage(root=tmp_path / "backup", name="local")


class FakeRemoteClient(RemoteClient):
    """In-memory remote; records every call for ordering assertions."""

    def __init__(self) -> None:
        self.calls: list[tuple] = []
        self.owner_repositories: list[str] = []
        self.wiki_enabled = True
        self.issues: list[Issue] = []
        self.issue_comments: dict[int, list[IssueComment]] = {}
        self.discussions: list[Discussion] = []
        self.discussion_comments: dict[int, list[DiscussionComment]] = {}
        self.replies: dict[str, list[DiscussionReply]] = {}
        self.releases: list[Release] = []
        self.asset_data: dict[int, bytes] = {}

    def list_owner_repositories(self, owner: str, kind: RepositoryType) -> list[str]:
        self.calls.append(("list_owner_repositories", owner, kind))
        return list(self.owner_repositories)

    def has_wiki(self, owner: str, name: str) -> bool:
        self.calls.append(("has_wiki", owner, name))
        return self.wiki_enabled

    def iter_issues(self, owner: str, name: str, since: datetime) -> Iterator[Issue]:
        self.calls.append(("iter_issues", since))
        for issue in self.issues:
            if issue.updated_at >= since:
                self.calls.append(("issue", issue.number))
                yield issue

    def iter_issue_comments(self, owner: str, name: str, number: int) -> Iterator[IssueComment]:
        self.calls.append(("issue_comments", number))
        yield from self.issue_comments.get(number, [])

    def iter_discussions(self, owner: str, name: str) -> Iterator[Discussion]:
        self.calls.append(("iter_discussions",))
        for discussion in self.discussions:
            self.calls.append(("discussion", discussion.number))
            yield discussion

    def iter_discussion_comments(
        self, owner: str, name: str, number: int
    ) -> Iterator[DiscussionComment]:
        self.calls.append(("discussion_comments", number))
        yield from self.discussion_comments.get(number, [])

    def iter_comment_replies(self, comment: DiscussionComment) -> Iterator[DiscussionReply]:
        self.calls.append(("replies", comment.node_id))
        yield from self.replies.get(comment.node_id, [])

    def list_releases(self, owner: str, name: str) -> list[Release]:
        self.calls.append(("list_releases",))
        return list(self.releases)

    def download_asset(self, owner: str, name: str, asset: ReleaseAsset) -> bytes:
        self.calls.append(("download", asset.name))
        return self.asset_data.get(asset.id, b"x" * asset.size)

    def downloads(self) -> list[str]:
        return [call[1] for call in self.calls if call[0] == "download"]


@pytest.fixture
def remote() -> FakeRemoteClient:
    return FakeRemoteClient()
