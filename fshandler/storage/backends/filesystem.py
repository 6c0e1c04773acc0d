"""
Filesystem storage backend implementation

This module provides a storage backend that maps the storage contract onto
a directory tree rooted at a configured directory.
"""

import datetime
import errno
import logging
import os
import shutil
from pathlib import Path
from typing import BinaryIO, Iterable, List, Optional

from ..exceptions import StorageBackendError, StorageConfigError, StorageNotFoundError, StoragePathError
from ..models import DIRECTORY_SIZE, FileMetadata, MetadataFilter
from ..utils import applyFilter, isInside, parentPrefix, validateFilePath, validateNewName, validatePath
from .abstract import AbstractStorageBackend

logger = logging.getLogger(__name__)


class LocalStorageBackend(AbstractStorageBackend):
    """
    Filesystem-based storage backend.

    Every relative path is resolved against rootDir and must stay inside it.
    Directories are real directories, so listings include sub-directories.

    Features:
    - Automatic root directory creation if it doesn't exist
    - Containment check after resolving symlinks and . segments
    - Atomic rename where the OS supports it
    - Proper error handling with StorageBackendError wrapping

    Args:
        rootDir: Root directory for storage (will be created if needed)

    Raises:
        StorageConfigError: If rootDir cannot be created or is not a directory

    Example:
        >>> backend = LocalStorageBackend("/tmp/storage")
        >>> with backend.writeFile("docs/a.txt") as f:
        ...     f.write(b"data")
        >>> backend.getMetadata("docs/a.txt").size
        4
    """

    def __init__(self, rootDir: str):
        """
        Initialize filesystem storage backend.

        Args:
            rootDir: Root directory path for storage

        Raises:
            StorageConfigError: If rootDir cannot be created or is not a directory
        """
        self.rootDir = Path(rootDir).expanduser().resolve()

        try:
            self.rootDir.mkdir(parents=True, exist_ok=True)
        except Exception as e:
            raise StorageConfigError(f"Failed to create root directory '{rootDir}': {e}") from e

        if not self.rootDir.is_dir():
            raise StorageConfigError(f"Root path '{rootDir}' exists but is not a directory")

    def _resolvePath(self, path: str) -> Path:
        """
        Resolve a relative path to a location inside the root directory.

        Args:
            path: Relative path, "" or "." for the root

        The returned path is the entry the caller named: a symlink inside the
        root stays a symlink, only its target is checked for containment.

        Returns:
            Absolute path inside rootDir

        Raises:
            StoragePathError: If the path is invalid or escapes the root
        """
        normalized = validatePath(path, allowRoot=True)
        if not normalized:
            return self.rootDir

        fullPath = self.rootDir / normalized
        resolved = fullPath.resolve()
        if resolved != self.rootDir and not resolved.is_relative_to(self.rootDir):
            raise StoragePathError(f"Path '{path}' resolves outside of the storage root")
        return fullPath

    def _relativePath(self, fullPath: Path) -> str:
        """Path of fullPath relative to the root, forward-slash separated"""
        if fullPath == self.rootDir:
            return ""
        return fullPath.relative_to(self.rootDir).as_posix()

    def _buildMetadata(self, fullPath: Path) -> FileMetadata:
        stat = fullPath.stat()
        isDirectory = fullPath.is_dir()
        # st_birthtime exists on macOS/BSD (and Windows since 3.12), st_ctime is the fallback
        createdAt = getattr(stat, "st_birthtime", stat.st_ctime)
        return FileMetadata(
            name="" if fullPath == self.rootDir else fullPath.name,
            path=self._relativePath(fullPath),
            size=DIRECTORY_SIZE if isDirectory else stat.st_size,
            creationTime=datetime.datetime.fromtimestamp(createdAt, tz=datetime.timezone.utc),
            lastModifiedTime=datetime.datetime.fromtimestamp(stat.st_mtime, tz=datetime.timezone.utc),
            isDirectory=isDirectory,
        )

    def _openStream(self, path: str, mode: str, action: str) -> BinaryIO:
        fullPath = self._resolvePath(validateFilePath(path))
        try:
            if "r" not in mode:
                fullPath.parent.mkdir(parents=True, exist_ok=True)
            return open(fullPath, mode)
        except FileNotFoundError as e:
            raise StorageNotFoundError(f"File not found: '{path}'", originalError=e) from e
        except OSError as e:
            logger.error(f"Failed to {action} file at path '{path}': {e}")
            raise StorageBackendError(f"Failed to {action} file '{path}': {e}", originalError=e) from e

    def createFile(self, path: str) -> FileMetadata:
        fullPath = self._resolvePath(validateFilePath(path))
        try:
            fullPath.parent.mkdir(parents=True, exist_ok=True)
            fullPath.touch(exist_ok=False)
            return self._buildMetadata(fullPath)
        except OSError as e:
            logger.error(f"Failed to create file at path '{path}': {e}")
            raise StorageBackendError(f"Failed to create file '{path}': {e}", originalError=e) from e

    def createDirectory(self, path: str) -> FileMetadata:
        fullPath = self._resolvePath(validatePath(path))
        try:
            fullPath.mkdir(parents=True, exist_ok=True)
            return self._buildMetadata(fullPath)
        except OSError as e:
            logger.error(f"Failed to create directory at path '{path}': {e}")
            raise StorageBackendError(f"Failed to create directory '{path}': {e}", originalError=e) from e

    def readFile(self, path: str) -> BinaryIO:
        return self._openStream(path, "rb", "read")

    def writeFile(self, path: str) -> BinaryIO:
        return self._openStream(path, "wb", "write")

    def appendFile(self, path: str) -> BinaryIO:
        return self._openStream(path, "ab", "append to")

    def move(self, sourcePath: str, destinationPath: str) -> FileMetadata:
        sourceKey = validatePath(sourcePath).rstrip("/")
        destinationKey = validatePath(destinationPath).rstrip("/")
        if isInside(destinationKey, sourceKey):
            raise StoragePathError(f"Cannot move '{sourcePath}' into itself ('{destinationPath}')")

        source = self._resolvePath(sourceKey)
        destination = self._resolvePath(destinationKey)
        if not source.exists() and not source.is_symlink():
            raise StorageNotFoundError(f"Source not found: '{sourcePath}'")
        if source == destination:
            return self._buildMetadata(destination)

        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            try:
                os.replace(source, destination)
            except OSError as e:
                # Rename across devices, fall back to copy + delete
                if e.errno != errno.EXDEV:
                    raise
                if destination.is_dir():
                    shutil.rmtree(destination)
                shutil.move(str(source), str(destination))
            return self._buildMetadata(destination)
        except OSError as e:
            logger.error(f"Failed to move '{sourcePath}' to '{destinationPath}': {e}")
            raise StorageBackendError(
                f"Failed to move '{sourcePath}' to '{destinationPath}': {e}", originalError=e
            ) from e

    def rename(self, path: str, newName: str) -> FileMetadata:
        path = validatePath(path).rstrip("/")
        return self.move(path, parentPrefix(path) + validateNewName(newName))

    def delete(self, path: str) -> None:
        fullPath = self._resolvePath(validatePath(path))
        if fullPath == self.rootDir:
            raise StoragePathError("Refusing to delete the storage root")

        try:
            # A symlink is removed itself, never the tree it points to
            if fullPath.is_dir() and not fullPath.is_symlink():
                shutil.rmtree(fullPath)
            else:
                fullPath.unlink()
        except FileNotFoundError as e:
            raise StorageNotFoundError(f"Path not found: '{path}'", originalError=e) from e
        except OSError as e:
            logger.error(f"Failed to delete path '{path}': {e}")
            raise StorageBackendError(f"Failed to delete '{path}': {e}", originalError=e) from e

    def _checkDirectory(self, path: str) -> Optional[Path]:
        """Resolve a directory for listing, None if it does not exist"""
        dirPath = self._resolvePath(path)
        if not dirPath.exists():
            logger.warning(f"Directory does not exist at path: '{path}'")
            return None
        if not dirPath.is_dir():
            raise StoragePathError(f"Path exists but is not a directory: '{path}'")
        return dirPath

    def _collectMetadata(self, fullPaths: Iterable[Path]) -> List[FileMetadata]:
        entries: List[FileMetadata] = []
        for fullPath in fullPaths:
            try:
                entries.append(self._buildMetadata(fullPath))
            except FileNotFoundError:
                # Removed between enumeration and stat
                logger.warning(f"Skipping vanished entry: '{fullPath}'")
        return entries

    def list(self, path: str, filter: Optional[MetadataFilter] = None) -> List[FileMetadata]:
        dirPath = self._checkDirectory(path)
        if dirPath is None:
            return []

        try:
            entries = self._collectMetadata(sorted(dirPath.iterdir()))
        except OSError as e:
            logger.error(f"Failed to list directory at path '{path}': {e}")
            raise StorageBackendError(f"Failed to list directory '{path}': {e}", originalError=e) from e

        return applyFilter(entries, filter)

    def listRecursive(self, path: str, filter: Optional[MetadataFilter] = None) -> List[FileMetadata]:
        dirPath = self._checkDirectory(path)
        if dirPath is None:
            return []

        children: List[Path] = []
        try:
            for currentDir, dirNames, fileNames in os.walk(dirPath):
                dirNames.sort()
                children.extend(Path(currentDir) / name for name in dirNames + sorted(fileNames))
            entries = self._collectMetadata(children)
        except OSError as e:
            logger.error(f"Failed to list directory recursively at path '{path}': {e}")
            raise StorageBackendError(f"Failed to list directory '{path}' recursively: {e}", originalError=e) from e

        return applyFilter(entries, filter)

    def getMetadata(self, path: str) -> FileMetadata:
        fullPath = self._resolvePath(path)
        try:
            return self._buildMetadata(fullPath)
        except FileNotFoundError as e:
            raise StorageNotFoundError(f"Path not found: '{path}'", originalError=e) from e
        except OSError as e:
            logger.error(f"Failed to get metadata for path '{path}': {e}")
            raise StorageBackendError(f"Failed to get metadata for '{path}': {e}", originalError=e) from e

    def isHealthy(self) -> bool:
        return self.rootDir.is_dir() and os.access(self.rootDir, os.R_OK) and os.access(self.rootDir, os.W_OK)

    def __repr__(self) -> str:
        return f"LocalStorageBackend(rootDir={str(self.rootDir)!r})"
