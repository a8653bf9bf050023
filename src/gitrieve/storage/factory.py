"""Storage backend factory."""

import structlog

from gitrieve.core.exceptions import ConfigurationError
from gitrieve.core.models.repository import StorageDescriptor, StorageType
from gitrieve.storage.base import StorageBackend

logger = structlog.get_logger(__name__)


class StorageFactory:
    """Creates (and caches) backends from storage descriptors."""

    def __init__(self) -> None:
        self._backends: dict[str, StorageBackend] = {}

    def get_backend(self, descriptor: StorageDescriptor) -> StorageBackend:
        """Get or create the backend for ``descriptor``."""
        if descriptor.name not in self._backends:
            self._backends[descriptor.name] = self._create(descriptor)
            logger.debug("Storage backend created", storage=descriptor.name, type=descriptor.type.value)
        return self._backends[descriptor.name]

    def _create(self, descriptor: StorageDescriptor) -> StorageBackend:
        if descriptor.type == StorageType.FILE:
            from gitrieve.storage.file import FileStorage

            return FileStorage(root=descriptor.path, name=descriptor.name)
        elif descriptor.type == StorageType.S3:
            from gitrieve.storage.s3 import S3Storage

            if not descriptor.bucket:
                raise ConfigurationError(
                    f"Storage {descriptor.name} has no bucket",
                    details={"storage": descriptor.name},
                )
            return S3Storage(
                bucket=descriptor.bucket,
                prefix=descriptor.path,
                endpoint=descriptor.endpoint,
                region=descriptor.region,
                access_key_id=descriptor.access_key_id,
                secret_access_key=descriptor.secret_access_key,
                name=descriptor.name,
            )
        else:
            raise ConfigurationError(f"Unknown storage type: {descriptor.type}")
