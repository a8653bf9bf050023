"""Core domain models and exceptions for gitrieve."""

from gitrieve.core.exceptions import (
    ArchiveError,
    BranchReconciliationError,
    ConfigurationError,
    GitCommandError,
    GitrieveError,
    ObjectNotFoundError,
    RemoteAPIError,
    StorageError,
    TransportError,
    WorkspaceError,
)
from gitrieve.core.models import (
    AppConfig,
    BranchState,
    BranchStatus,
    Discussion,
    DiscussionComment,
    DiscussionReply,
    Issue,
    IssueComment,
    ObjectMetaInfo,
    Release,
    ReleaseAsset,
    RemoteIdentity,
    RepositoryDescriptor,
    RepositoryType,
    StorageDescriptor,
    StorageType,
    StoredObject,
)

__all__ = [
    # Models
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
    # Exceptions
    "GitrieveError",
    "ConfigurationError",
    "TransportError",
    "GitCommandError",
    "RemoteAPIError",
    "BranchReconciliationError",
    "StorageError",
    "ObjectNotFoundError",
    "ArchiveError",
    "WorkspaceError",
]
