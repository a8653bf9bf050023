"""Repository, storage and application configuration models."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

DEFAULT_CONCURRENCY_NUM = 3
DEFAULT_RELEASE_NUM_LIMIT = 3
DEFAULT_RELEASE_SIZE_LIMIT = 300_000_000


class RepositoryType(str, Enum):
    """What a configured repository entry refers to."""

    REPO = "repo"
    USER = "user"
    ORG = "org"


class StorageType(str, Enum):
    """Supported storage backends."""

    FILE = "file"
    S3 = "s3"


class RepositoryDescriptor(BaseModel):
    """A repository to mirror, as declared in the configuration file.

    YAML keys are camelCase (``useCache``, ``allBranches``...); attributes
    are snake_case. Descriptors are immutable once loaded.
    """

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    name: str
    url: str = ""
    cron: str = ""
    storage: list[str] = Field(default_factory=list)
    use_cache: bool = False
    type: RepositoryType = RepositoryType.REPO
    org_name: str = ""
    all_branches: bool = False
    depth: int = Field(default=0, ge=0)  # 0 means full history
    download_releases: bool = False
    download_issues: bool = False
    download_wiki: bool = False
    download_discussion: bool = False

    @field_validator("type", mode="before")
    @classmethod
    def _default_type(cls, value):
        # Entries without a type are plain repositories
        return value or RepositoryType.REPO


class StorageDescriptor(BaseModel):
    """A named storage backend instance."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    name: str
    type: StorageType
    path: str = ""
    endpoint: str | None = None
    bucket: str | None = None
    region: str | None = None
    access_key_id: str | None = Field(default=None, alias="accessKeyID")
    secret_access_key: str | None = None


class AppConfig(BaseModel):
    """Top-level configuration file contents."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    repository: list[RepositoryDescriptor] = Field(default_factory=list)
    storage: list[StorageDescriptor] = Field(default_factory=list)
    github_token: str = ""
    concurrency_num: int = DEFAULT_CONCURRENCY_NUM
    release_num_limit: int = DEFAULT_RELEASE_NUM_LIMIT
    release_size_limit: int = DEFAULT_RELEASE_SIZE_LIMIT

    @field_validator("concurrency_num")
    @classmethod
    def _default_concurrency(cls, value: int) -> int:
        if value < 0:
            raise ValueError("concurrencyNum must not be negative")
        return value or DEFAULT_CONCURRENCY_NUM

    @field_validator("release_num_limit")
    @classmethod
    def _default_release_num(cls, value: int) -> int:
        # 0 keeps the default, negative disables the limit
        return value or DEFAULT_RELEASE_NUM_LIMIT

    @field_validator("release_size_limit")
    @classmethod
    def _default_release_size(cls, value: int) -> int:
        return value or DEFAULT_RELEASE_SIZE_LIMIT

    def storage_map(self) -> dict[str, StorageDescriptor]:
        return {storage.name: storage for storage in self.storage}


class RemoteIdentity(BaseModel):
    """Host, owner and name of a remote repository.

    Every derived artifact is namespaced under ``host/owner/name``.
    """

    model_config = ConfigDict(frozen=True)

    host: str
    owner: str
    name: str

    def namespace(self, *parts: str) -> str:
        """Join ``host/owner/name`` with any extra key parts."""
        return "/".join([self.host, self.owner, self.name, *parts])

    def clone_url(self, wiki: bool = False) -> str:
        url = f"https://{self.host}/{self.owner}/{self.name}"
        if wiki:
            url += ".wiki"
        return url

    def __str__(self) -> str:
        return self.namespace()
