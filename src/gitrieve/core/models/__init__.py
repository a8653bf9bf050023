"""Domain models for gitrieve."""

from gitrieve.core.models.branch import BranchState, BranchStatus
from gitrieve.core.models.items import (
    Discussion,
    DiscussionComment,
    DiscussionReply,
    Issue,
    IssueComment,
)
from gitrieve.core.models.release import Release, ReleaseAsset
from gitrieve.core.models.repository import (
    AppConfig,
    RemoteIdentity,
    RepositoryDescriptor,
    RepositoryType,
    StorageDescriptor,
    StorageType,
)
from gitrieve.core.models.storage import ObjectMetaInfo, StoredObject

__all__ = [
    "AppConfig",
    "RepositoryDescriptor",
    "RepositoryType",
    "StorageDescriptor",
    "StorageType",
    "RemoteIdentity",
    "BranchState",
    "BranchStatus",
    "ObjectMetaInfo",
    "StoredObject",
    "Issue",
    "IssueComment",
    "Discussion",
    "DiscussionComment",
    "DiscussionReply",
    "Release",
    "ReleaseAsset",
]
