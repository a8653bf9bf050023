"""Service layer for gitrieve."""

from gitrieve.services.sync import SyncKind, SyncService

__all__ = ["SyncKind", "SyncService"]
