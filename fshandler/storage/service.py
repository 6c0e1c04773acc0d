"""
Storage service: Singleton service for file storage operations

This module provides a singleton service that selects one storage backend
(local filesystem or S3) from configuration and exposes the storage contract
to callers, validating every path before the backend is touched.
"""

import logging
import threading
from typing import TYPE_CHECKING, Any, BinaryIO, Dict, List, Optional, Union

from .backends.abstract import AbstractStorageBackend
from .backends.filesystem import LocalStorageBackend
from .backends.s3 import S3StorageBackend
from .exceptions import StorageConfigError
from .models import FileMetadata, MetadataFilter
from .utils import globFilter, validateNewName, validatePath

if TYPE_CHECKING:
    from fshandler.config.manager import ConfigManager

logger = logging.getLogger(__name__)

# Listing filter: predicate over metadata or a glob over entry names
ListFilter = Union[MetadataFilter, str, None]


class StorageService:
    """
    Singleton service for file storage operations.

    This service provides one hierarchical storage contract on top of
    interchangeable backends. The backend is configured once at startup
    through the injectConfig method and lives until shutdown().

    Supported backends:
    - local: Directory tree under a root directory
    - s3: AWS S3 or S3-compatible storage (alias: objectstore)

    Usage:
        storage = StorageService.getInstance()
        storage.injectConfig(configManager)

        storage.createDirectory("project")
        storage.writeBytes("project/a.txt", b"hi")
        entries = storage.list("project", "*.txt")
        storage.rename("project/a.txt", "b.txt")

        storage.shutdown()

    Thread Safety:
        The singleton instance creation is thread-safe using RLock.
        Individual backend operations are not serialized.
    """

    _instance: Union["StorageService", None] = None
    _lock = threading.RLock()

    def __new__(cls) -> "StorageService":
        """
        Create or return singleton instance with thread safety.

        Returns:
            The singleton StorageService instance
        """
        with cls._lock:
            if cls._instance is None:
                cls._instance = super().__new__(cls)
            return cls._instance

    def __init__(self):
        """
        Initialize storage service.

        Only runs once due to singleton pattern.
        """
        if not hasattr(self, "initialized"):
            self.backend: AbstractStorageBackend | None = None
            self.initialized = False
            logger.info("StorageService created, awaiting configuration, dood!")

    @classmethod
    def getInstance(cls) -> "StorageService":
        """
        Get singleton instance.

        Returns:
            The singleton StorageService instance
        """
        return cls()

    def injectConfig(self, configManager: "ConfigManager") -> None:
        """
        Initialize service with configuration from ConfigManager.

        Reads storage configuration and creates the backend selected by `type`.
        A previously configured backend is closed first.

        Args:
            configManager: The configuration manager containing storage settings

        Raises:
            StorageConfigError: If configuration is invalid or backend creation fails

        Configuration format:
            {
                "type": "local",  # or "s3" / "objectstore"
                "local": {"root-dir": "./storage"},
                "s3": {
                    "bucket": "my-bucket",
                    "region": "us-east-1",
                    "key-id": "...",
                    "key-secret": "...",
                    "endpoint": "http://localhost:9000",  # optional
                    "max-connections": 50,  # optional
                    "timeout": 5.0,  # optional, seconds
                }
            }
        """
        try:
            config = configManager.getStorageConfig()
            if not config:
                raise StorageConfigError("Storage configuration is missing")

            backend = self._createBackend(config)
        except StorageConfigError:
            raise
        except Exception as e:
            raise StorageConfigError(f"Failed to initialize storage service: {e}") from e

        if self.backend is not None:
            self.backend.close()
        self.backend = backend
        self.initialized = True
        logger.info(f"StorageService initialized with {backend!r}, dood!")

    def _createBackend(self, config: Dict[str, Any]) -> AbstractStorageBackend:
        storageType = config.get("type")
        if not storageType:
            raise StorageConfigError("Storage type is not specified in configuration")

        match storageType:
            case "local":
                localConfig = config.get("local")
                if not localConfig:
                    raise StorageConfigError("Local storage configuration is missing")

                rootDir = localConfig.get("root-dir")
                if not rootDir:
                    raise StorageConfigError("Local storage root-dir is not specified")

                # max-connections / timeout are accepted but have no meaning here
                return LocalStorageBackend(rootDir)

            case "s3" | "objectstore":
                s3Config = config.get("s3")
                if not s3Config:
                    raise StorageConfigError("S3 storage configuration is missing")

                requiredParams = ["bucket", "region", "key-id", "key-secret"]
                missingParams = [p for p in requiredParams if not s3Config.get(p)]
                if missingParams:
                    raise StorageConfigError(
                        f"S3 configuration missing required parameters: {', '.join(missingParams)}"
                    )

                return S3StorageBackend(
                    bucket=s3Config["bucket"],
                    region=s3Config["region"],
                    keyId=s3Config["key-id"],
                    keySecret=s3Config["key-secret"],
                    endpoint=s3Config.get("endpoint") or None,
                    maxConnections=s3Config.get("max-connections"),
                    timeout=s3Config.get("timeout"),
                )

            case _:
                raise StorageConfigError(f"Unknown storage type: {storageType}")

    def _ensureInitialized(self) -> AbstractStorageBackend:
        """
        Ensure the service is initialized before operations.

        Returns:
            The active backend

        Raises:
            StorageConfigError: If service is not initialized
        """
        if not self.initialized or self.backend is None:
            raise StorageConfigError("StorageService is not initialized. Call injectConfig() first, dood!")
        return self.backend

    @staticmethod
    def _buildFilter(filter: ListFilter) -> Optional[MetadataFilter]:
        if isinstance(filter, str):
            return globFilter(filter)
        return filter

    def createFile(self, path: str) -> FileMetadata:
        """
        Create an empty file.

        Raises:
            StorageConfigError: If service is not initialized
            StoragePathError: If the path is invalid
            StorageBackendError: If the file cannot be created
        """
        path = validatePath(path)
        metadata = self._ensureInitialized().createFile(path)
        logger.debug(f"Created file: {path}, dood!")
        return metadata

    def createDirectory(self, path: str) -> FileMetadata:
        """Create a directory, including missing parents"""
        path = validatePath(path)
        metadata = self._ensureInitialized().createDirectory(path)
        logger.debug(f"Created directory: {path}, dood!")
        return metadata

    def readFile(self, path: str) -> BinaryIO:
        """
        Open a file for reading. Use the result as a context manager.

        Raises:
            StoragePathError: If the path is invalid
            StorageNotFoundError: If the file does not exist
            StorageBackendError: If the file cannot be opened
        """
        return self._ensureInitialized().readFile(validatePath(path))

    def writeFile(self, path: str) -> BinaryIO:
        """
        Open a file for writing, replacing its content.

        On S3 the content is buffered and uploaded when the stream is closed,
        so close() can raise StorageBackendError.
        """
        return self._ensureInitialized().writeFile(validatePath(path))

    def appendFile(self, path: str) -> BinaryIO:
        """
        Open a file for appending, creating it if needed.

        Raises:
            StorageUnsupportedError: If the backend cannot append (S3)
        """
        return self._ensureInitialized().appendFile(validatePath(path))

    def readBytes(self, path: str) -> bytes:
        """Read the whole content of a file"""
        with self.readFile(path) as stream:
            return stream.read()

    def writeBytes(self, path: str, data: bytes) -> FileMetadata:
        """
        Replace the content of a file.

        Returns:
            Metadata of the written file
        """
        with self.writeFile(path) as stream:
            stream.write(data)
        logger.debug(f"Wrote {len(data)} bytes to: {path}, dood!")
        return self.getMetadata(path)

    def move(self, sourcePath: str, destinationPath: str) -> FileMetadata:
        """Move a file or directory, overwriting the destination"""
        sourcePath = validatePath(sourcePath)
        destinationPath = validatePath(destinationPath)
        metadata = self._ensureInitialized().move(sourcePath, destinationPath)
        logger.debug(f"Moved {sourcePath} to {destinationPath}, dood!")
        return metadata

    def rename(self, path: str, newName: str) -> FileMetadata:
        """Rename a file or directory within its parent directory"""
        path = validatePath(path)
        newName = validateNewName(newName)
        metadata = self._ensureInitialized().rename(path, newName)
        logger.debug(f"Renamed {path} to {metadata.path}, dood!")
        return metadata

    def delete(self, path: str) -> None:
        """Delete a file, or a directory with its content"""
        path = validatePath(path)
        self._ensureInitialized().delete(path)
        logger.debug(f"Deleted: {path}, dood!")

    def list(self, path: str = "", filter: ListFilter = None) -> List[FileMetadata]:
        """
        List immediate children of a directory.

        Args:
            path: Directory path (default: "" for the root)
            filter: Optional predicate, or glob over entry names (e.g. "*.txt")

        Returns:
            Matching entries. Empty list if the directory does not exist.
        """
        path = validatePath(path, allowRoot=True)
        entries = self._ensureInitialized().list(path, self._buildFilter(filter))
        logger.debug(f"Listed {len(entries)} entries in: '{path}', dood!")
        return entries

    def listRecursive(self, path: str = "", filter: ListFilter = None) -> List[FileMetadata]:
        """
        List everything below a directory, excluding the directory itself.

        Same filter and missing-directory rules as list().
        """
        path = validatePath(path, allowRoot=True)
        entries = self._ensureInitialized().listRecursive(path, self._buildFilter(filter))
        logger.debug(f"Listed {len(entries)} entries recursively in: '{path}', dood!")
        return entries

    def getMetadata(self, path: str = "") -> FileMetadata:
        """Get metadata of a file or directory ("" for the root)"""
        return self._ensureInitialized().getMetadata(validatePath(path, allowRoot=True))

    def isHealthy(self) -> bool:
        """Check backend health; an unconfigured service is unhealthy"""
        if not self.initialized or self.backend is None:
            return False
        healthy = self.backend.isHealthy()
        if not healthy:
            logger.warning(f"Storage backend {self.backend!r} is unhealthy, dood!")
        return healthy

    def shutdown(self) -> None:
        """Release the backend. The service must be configured again before reuse."""
        if self.backend is not None:
            self.backend.close()
            logger.info("StorageService shut down, dood!")
        self.backend = None
        self.initialized = False
