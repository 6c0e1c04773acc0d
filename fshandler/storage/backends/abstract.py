"""
Abstract storage backend interface

This module defines the abstract base class that all storage backends must implement.
It provides a consistent interface for storage operations across different backend types.
"""

from abc import ABC, abstractmethod
from typing import BinaryIO, List, Optional

from ..models import FileMetadata, MetadataFilter


class AbstractStorageBackend(ABC):
    """
    Abstract base class for storage backends.

    All storage backend implementations must inherit from this class and implement
    all abstract methods. This ensures callers see the same hierarchical contract
    whether the medium is a directory tree or a flat object store.

    Paths are relative, forward-slash separated and validated with
    validatePath() before use. Implementations should wrap backend-specific
    errors in StorageBackendError (StorageNotFoundError for missing paths).

    Backends are context managers; leaving the block calls close().
    """

    @abstractmethod
    def createFile(self, path: str) -> FileMetadata:
        """
        Create an empty file, creating parent directories where the medium needs them.

        Args:
            path: Relative path of the new file

        Returns:
            Metadata of the created file

        Raises:
            StoragePathError: If the path is invalid
            StorageBackendError: If the file cannot be created
        """
        pass

    @abstractmethod
    def createDirectory(self, path: str) -> FileMetadata:
        """
        Create a directory (and missing parents).

        Args:
            path: Relative path of the new directory

        Returns:
            Metadata of the directory, isDirectory is True

        Raises:
            StoragePathError: If the path is invalid
            StorageBackendError: If the directory cannot be created
        """
        pass

    @abstractmethod
    def readFile(self, path: str) -> BinaryIO:
        """
        Open a buffered binary stream for reading. The caller must close it.

        Raises:
            StorageNotFoundError: If the file does not exist
            StorageBackendError: If the file cannot be opened
        """
        pass

    @abstractmethod
    def writeFile(self, path: str) -> BinaryIO:
        """
        Open a binary stream that replaces the file content. The caller must close it.

        Raises:
            StorageBackendError: If the file cannot be opened
        """
        pass

    @abstractmethod
    def appendFile(self, path: str) -> BinaryIO:
        """
        Open a binary stream appending to the file, creating it if absent.

        Raises:
            StorageUnsupportedError: If the backend has no append primitive
            StorageBackendError: If the file cannot be opened
        """
        pass

    @abstractmethod
    def move(self, sourcePath: str, destinationPath: str) -> FileMetadata:
        """
        Move a file or directory, overwriting the destination if it exists.

        Returns:
            Metadata of the destination

        Raises:
            StorageNotFoundError: If the source does not exist
            StorageBackendError: If the move fails
        """
        pass

    @abstractmethod
    def rename(self, path: str, newName: str) -> FileMetadata:
        """
        Rename a file or directory within its parent.

        Args:
            path: Current relative path
            newName: New final path segment

        Returns:
            Metadata of the renamed entry
        """
        pass

    @abstractmethod
    def delete(self, path: str) -> None:
        """
        Delete a file, or a directory with all of its content.

        Raises:
            StorageNotFoundError: If the path does not exist
            StorageBackendError: If the deletion fails
        """
        pass

    @abstractmethod
    def list(self, path: str, filter: Optional[MetadataFilter] = None) -> List[FileMetadata]:
        """
        List the immediate children of a directory.

        Args:
            path: Directory path, "" for the root
            filter: Optional predicate, everything passes when omitted

        Returns:
            Metadata of matching children. Empty list if the directory does not exist.
        """
        pass

    @abstractmethod
    def listRecursive(self, path: str, filter: Optional[MetadataFilter] = None) -> List[FileMetadata]:
        """
        List everything below a directory, excluding the directory itself.

        No ordering is guaranteed. Empty list if the directory does not exist.
        """
        pass

    @abstractmethod
    def getMetadata(self, path: str) -> FileMetadata:
        """
        Get metadata of a file or directory.

        Raises:
            StorageNotFoundError: If the path does not exist
            StorageBackendError: If the attributes cannot be read
        """
        pass

    @abstractmethod
    def isHealthy(self) -> bool:
        """Check on demand whether the backend medium is usable"""
        pass

    def close(self) -> None:
        """Release backend resources. Backends without resources do nothing."""
        pass

    def __enter__(self) -> "AbstractStorageBackend":
        return self

    def __exit__(self, excType, excValue, traceback) -> None:
        self.close()
