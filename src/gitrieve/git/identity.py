"""Remote repository identity resolution."""

import re
from urllib.parse import urlparse

from gitrieve.core.exceptions import ConfigurationError
from gitrieve.core.models.repository import RemoteIdentity

INVALID_NAMES = {"", ".", "..", "/"}


def normalize_remote_url(url: str) -> str:
    """Normalize a remote URL to ``host/owner/name``.

    Handles:
    - git@github.com:org/repo.git -> github.com/org/repo
    - https://github.com/org/repo.git -> github.com/org/repo
    - github.com/org/repo -> github.com/org/repo
    """
    url = url.strip().rstrip("/")
    # Strip .git suffix
    url = re.sub(r"\.git$", "", url)
    # Convert SSH to a plain path
    ssh_match = re.match(r"^[\w.-]+@([^:/]+):(.+)$", url)
    if ssh_match:
        host, path = ssh_match.groups()
        return f"{host}/{path.strip('/')}"
    if "://" in url:
        parsed = urlparse(url)
        return f"{parsed.hostname or ''}/{parsed.path.strip('/')}"
    return url


def resolve_identity(url: str) -> RemoteIdentity:
    """Parse ``url`` into host, owner and name.

    Raises ``ConfigurationError`` for URLs that cannot name a repository,
    before anything touches the network or the filesystem.
    """
    parts = [part for part in normalize_remote_url(url).split("/") if part]
    if len(parts) < 3:
        raise ConfigurationError(f"Invalid repository URL: {url!r}", details={"url": url})

    host, owner, name = parts[0], "/".join(parts[1:-1]), parts[-1]
    if name in INVALID_NAMES or any(part in INVALID_NAMES for part in parts):
        raise ConfigurationError(f"Invalid repository name in URL: {url!r}", details={"url": url})
    return RemoteIdentity(host=host, owner=owner, name=name)
