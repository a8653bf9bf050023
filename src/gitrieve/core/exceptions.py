"""Exception hierarchy for gitrieve."""

from typing import Any


class GitrieveError(Exception):
    """Base exception for all gitrieve errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(GitrieveError):
    """Invalid or inconsistent configuration (unknown storage, bad URL, bad cron)."""


class TransportError(GitrieveError):
    """A remote operation failed. Never retried."""


class GitCommandError(TransportError):
    """A git CLI invocation exited with a non-zero status."""

    def __init__(
        self,
        message: str,
        command: list[str] | None = None,
        stderr: str = "",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.command = command or []
        self.stderr = stderr


class RemoteAPIError(TransportError):
    """The hosting API returned an error response."""


class BranchReconciliationError(GitrieveError):
    """The working tree could not be left on the default branch."""


class StorageError(GitrieveError):
    """A storage backend operation failed."""


class ObjectNotFoundError(StorageError):
    """The requested key or prefix does not exist in the backend."""


class ArchiveError(GitrieveError):
    """Packaging a directory into an archive failed."""


class WorkspaceError(GitrieveError):
    """The local working directory or an item file in it could not be used."""
