"""Test factories using factory_boy."""

from datetime import datetime, timedelta, timezone

import factory

from gitrieve.core.models.items import Discussion, DiscussionComment, Issue, IssueComment
from gitrieve.core.models.release import Release, ReleaseAsset
from gitrieve.core.models.repository import RepositoryDescriptor, StorageDescriptor, StorageType

BASE_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)


class RepositoryDescriptorFactory(factory.Factory):
    """Factory for creating RepositoryDescriptor instances."""

    class Meta:
        model = RepositoryDescriptor

    name = factory.Sequence(lambda n: f"repo{n}")
    url = factory.LazyAttribute(lambda o: f"github.com/octo/{o.name}")
    storage = factory.LazyFunction(lambda: ["local"])


class StorageDescriptorFactory(factory.Factory):
    """Factory for creating StorageDescriptor instances."""

    class Meta:
        model = StorageDescriptor

    name = "local"
    type = StorageType.FILE
    path = "backup"


class ReleaseAssetFactory(factory.Factory):
    """Factory for creating ReleaseAsset instances."""

    class Meta:
        model = ReleaseAsset

    id = factory.Sequence(lambda n: n + 1)
    name = factory.Sequence(lambda n: f"asset-{n}.tar.gz")
    size = 100
    state = "uploaded"


class ReleaseFactory(factory.Factory):
    """Factory for creating Release instances."""

    class Meta:
        model = Release

    id = factory.Sequence(lambda n: n + 1)
    tag_name = factory.Sequence(lambda n: f"v{n}")
    published_at = factory.Sequence(lambda n: BASE_TIME + timedelta(days=n))
    assets = factory.LazyFunction(lambda: [ReleaseAssetFactory()])


class IssueCommentFactory(factory.Factory):
    """Factory for creating IssueComment instances."""

    class Meta:
        model = IssueComment

    id = factory.Sequence(lambda n: 1000 + n)
    author = "commenter"
    body = factory.Faker("sentence")
    created_at = BASE_TIME
    updated_at = BASE_TIME


class IssueFactory(factory.Factory):
    """Factory for creating Issue instances."""

    class Meta:
        model = Issue

    number = factory.Sequence(lambda n: n + 1)
    title = factory.Faker("sentence", nb_words=4)
    body = factory.Faker("paragraph")
    state = "open"
    author = "octocat"
    created_at = BASE_TIME
    updated_at = factory.Sequence(lambda n: BASE_TIME + timedelta(hours=n))


class DiscussionCommentFactory(factory.Factory):
    """Factory for creating DiscussionComment instances."""

    class Meta:
        model = DiscussionComment

    id = factory.Sequence(lambda n: 2000 + n)
    node_id = factory.Sequence(lambda n: f"DC_{n}")
    author = "commenter"
    body = factory.Faker("sentence")
    created_at = BASE_TIME


class DiscussionFactory(factory.Factory):
    """Factory for creating Discussion instances."""

    class Meta:
        model = Discussion

    number = factory.Sequence(lambda n: n + 1)
    title = factory.Faker("sentence", nb_words=4)
    body = factory.Faker("paragraph")
    category = "General"
    author = "octocat"
    created_at = BASE_TIME
    updated_at = factory.Sequence(lambda n: BASE_TIME + timedelta(hours=n))
