"""S3-compatible object storage backend."""

import boto3
import structlog
from botocore.exceptions import BotoCoreError, ClientError

from gitrieve.core.exceptions import ObjectNotFoundError, StorageError
from gitrieve.core.models.storage import ObjectMetaInfo, StoredObject
from gitrieve.storage.base import StorageBackend

logger = structlog.get_logger(__name__)


def normalize_prefix(prefix: str) -> str:
    p = str(prefix or "").strip().strip("/")
    if p:
        p = p + "/"
    return p


class S3Storage(StorageBackend):
    """Stores objects in a bucket, optionally below a key prefix.

    Directories are emulated with ``/``-delimited common prefixes.
    """

    def __init__(
        self,
        bucket: str,
        prefix: str = "",
        endpoint: str | None = None,
        region: str | None = None,
        access_key_id: str | None = None,
        secret_access_key: str | None = None,
        name: str = "s3",
        client=None,
    ) -> None:
        self.name = name
        self._bucket = bucket
        self._prefix = normalize_prefix(prefix)
        self._client = client or boto3.client(
            "s3",
            endpoint_url=endpoint or None,
            region_name=region or None,
            aws_access_key_id=access_key_id or None,
            aws_secret_access_key=secret_access_key or None,
        )

    def _key(self, key: str) -> str:
        if not key:
            raise StorageError("Invalid key: key cannot be empty", details={"storage": self.name})
        return self._prefix + key.strip("/")

    def _relative(self, full_key: str) -> str:
        return full_key[len(self._prefix):].rstrip("/")

    def _error(self, action: str, key: str, e: Exception) -> StorageError:
        return StorageError(
            f"Failed to {action} {key}: {e}",
            details={"storage": self.name, "bucket": self._bucket, "key": key},
        )

    def list_meta(self, prefix: str) -> list[ObjectMetaInfo]:
        full = self._key(prefix)
        try:
            head = self._client.head_object(Bucket=self._bucket, Key=full)
        except ClientError:
            head = None
        except BotoCoreError as e:
            raise self._error("list", prefix, e) from e
        if head is not None:
            return [
                ObjectMetaInfo(
                    path=prefix.strip("/"),
                    size=head["ContentLength"],
                    last_modified=head.get("LastModified"),
                )
            ]

        objects: list[ObjectMetaInfo] = []
        try:
            paginator = self._client.get_paginator("list_objects_v2")
            pages = paginator.paginate(Bucket=self._bucket, Prefix=full + "/", Delimiter="/")
            for page in pages:
                for common in page.get("CommonPrefixes", []):
                    objects.append(ObjectMetaInfo(path=self._relative(common["Prefix"])))
                for item in page.get("Contents", []):
                    objects.append(
                        ObjectMetaInfo(
                            path=self._relative(item["Key"]),
                            size=item["Size"],
                            last_modified=item.get("LastModified"),
                        )
                    )
        except (BotoCoreError, ClientError) as e:
            raise self._error("list", prefix, e) from e

        if not objects:
            raise ObjectNotFoundError(
                f"Prefix does not exist: {prefix}", details={"storage": self.name, "prefix": prefix}
            )
        return sorted(objects, key=lambda meta: meta.path)

    def get(self, key: str) -> StoredObject:
        try:
            response = self._client.get_object(Bucket=self._bucket, Key=self._key(key))
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in ("NoSuchKey", "404"):
                raise ObjectNotFoundError(
                    f"Object does not exist: {key}", details={"storage": self.name, "key": key}
                ) from e
            raise self._error("get", key, e) from e
        except BotoCoreError as e:
            raise self._error("get", key, e) from e
        content = response["Body"].read()
        return StoredObject(
            meta=ObjectMetaInfo(
                path=key, size=len(content), last_modified=response.get("LastModified")
            ),
            content=content,
        )

    def put(self, key: str, data: bytes) -> None:
        try:
            self._client.put_object(Bucket=self._bucket, Key=self._key(key), Body=data)
        except (BotoCoreError, ClientError) as e:
            raise self._error("put", key, e) from e
        logger.debug("Object stored", storage=self.name, key=key, size=len(data))

    def delete(self, key: str) -> None:
        full = self._key(key)
        try:
            keys = [full]
            paginator = self._client.get_paginator("list_objects_v2")
            for page in paginator.paginate(Bucket=self._bucket, Prefix=full + "/"):
                keys.extend(item["Key"] for item in page.get("Contents", []))
            # delete_objects accepts at most 1000 keys per call
            for start in range(0, len(keys), 1000):
                batch = [{"Key": k} for k in keys[start:start + 1000]]
                self._client.delete_objects(Bucket=self._bucket, Delete={"Objects": batch})
        except (BotoCoreError, ClientError) as e:
            raise self._error("delete", key, e) from e
