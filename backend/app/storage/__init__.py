"""
Storage module for the remote folder provider (Google Drive).

The upload service depends only on StorageClient; GoogleDriveClient is
the production implementation.
"""
from app.storage.base import Folder, StorageClient, StoredBlob
from app.storage.drive_client import GoogleDriveClient, UnconfiguredStorageClient

__all__ = [
    "Folder",
    "StorageClient",
    "StoredBlob",
    "GoogleDriveClient",
    "UnconfiguredStorageClient",
]
