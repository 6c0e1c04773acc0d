"""
Storage package

This package provides one hierarchical storage contract (create, read, write,
append, move, rename, delete, list, stat, health) over interchangeable backend
implementations (local filesystem, S3).
"""

from .exceptions import (
    StorageBackendError,
    StorageConfigError,
    StorageError,
    StorageNotFoundError,
    StoragePathError,
    StorageUnsupportedError,
)
from .models import FileMetadata
from .service import StorageService

__all__ = [
    "FileMetadata",
    "StorageBackendError",
    "StorageConfigError",
    "StorageError",
    "StorageNotFoundError",
    "StoragePathError",
    "StorageService",
    "StorageUnsupportedError",
]
