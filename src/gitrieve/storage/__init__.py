"""Storage backends for gitrieve."""

from gitrieve.storage.base import StorageBackend
from gitrieve.storage.factory import StorageFactory
from gitrieve.storage.file import FileStorage

__all__ = ["FileStorage", "StorageBackend", "StorageFactory"]
