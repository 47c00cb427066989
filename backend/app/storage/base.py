"""
Base class for remote storage clients.
The upload service only talks to storage through this interface.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Folder:
    """A named container in the storage provider."""
    id: str
    name: str


@dataclass(frozen=True)
class StoredBlob:
    """Result of a single file write."""
    id: str
    name: str
    link: Optional[str]


class StorageClient(ABC):
    """
    Abstract base class for folder-based storage providers.

    Methods are blocking; callers run them off the event loop.
    """

    @abstractmethod
    def find_folder(self, name: str) -> Optional[Folder]:
        """
        Find a non-trashed folder with exactly this name.

        Returns:
            The first matching folder, or None if there is none
        """
        pass

    @abstractmethod
    def create_folder(self, name: str) -> Folder:
        """Create a new folder with the given name."""
        pass

    @abstractmethod
    def write_file(self, name: str, parent_id: str, mime_type: str, data: bytes) -> StoredBlob:
        """
        Write a file into a folder.

        Args:
            name: File name to store under
            parent_id: Destination folder ID
            mime_type: Declared content type of the data
            data: Raw file bytes

        Returns:
            StoredBlob with provider ID and shareable link
        """
        pass

    @abstractmethod
    def folder_link(self, folder_id: str) -> str:
        """Shareable link to a folder."""
        pass
