"""Storage object models."""

from datetime import datetime

from pydantic import BaseModel


class ObjectMetaInfo(BaseModel):
    """Metadata of an object (or directory-like prefix) in a backend."""

    path: str
    size: int = 0
    last_modified: datetime | None = None


class StoredObject(BaseModel):
    """An object's content together with its metadata."""

    meta: ObjectMetaInfo
    content: bytes
