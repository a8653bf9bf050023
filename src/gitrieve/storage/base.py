"""Storage backend interface."""

from abc import ABC, abstractmethod

from gitrieve.core.models.storage import ObjectMetaInfo, StoredObject


class StorageBackend(ABC):
    """A key/value object store addressed by ``/``-joined relative keys."""

    name: str

    @abstractmethod
    def list_meta(self, prefix: str) -> list[ObjectMetaInfo]:
        """List metadata under ``prefix``.

        A directory-like prefix yields its direct children; a key naming a
        single object yields that object. Raises ``ObjectNotFoundError``
        when nothing exists at ``prefix``.
        """

    def list_objects(self, prefix: str) -> list[StoredObject]:
        """List objects (with content) directly under ``prefix``."""
        return [
            StoredObject(meta=meta, content=self.get(meta.path).content)
            for meta in self.list_meta(prefix)
        ]

    @abstractmethod
    def get(self, key: str) -> StoredObject:
        """Fetch a single object."""

    @abstractmethod
    def put(self, key: str, data: bytes) -> None:
        """Store ``data`` at ``key``, replacing any existing object."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Delete the object or directory-like prefix at ``key``."""
