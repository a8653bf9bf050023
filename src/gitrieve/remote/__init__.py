"""Remote hosting API clients."""

from gitrieve.remote.base import RemoteClient
from gitrieve.remote.github import GitHubClient

__all__ = ["GitHubClient", "RemoteClient"]
