"""
Storage exceptions

This module defines the exception hierarchy for the storage layer.
All storage-related errors inherit from StorageError base class.
"""


class StorageError(Exception):
    """
    Base exception for all storage errors.

    Catch this to handle any storage error generically.
    """

    pass


class StoragePathError(StorageError):
    """
    Exception raised when a caller-supplied path or name is rejected.

    This exception is raised before any backend is touched when:
    - A mandatory path is empty
    - The path is absolute (leading slash/backslash or drive letter)
    - The path contains a parent directory (..) segment
    - The path resolves outside of the backend root
    - A new name for rename contains a slash or ..

    It is also raised when an existing file is listed as if it were a directory.
    """

    pass


class StorageConfigError(StorageError):
    """
    Exception raised when storage configuration is invalid.

    This exception is raised during service initialization when:
    - Required configuration parameters are missing
    - Backend type is not recognized
    - The local root directory cannot be created or is not a directory
    """

    pass


class StorageUnsupportedError(StorageError):
    """
    Exception raised when the active backend cannot perform an operation at all.

    For example, object stores have no append primitive.
    """

    pass


class StorageBackendError(StorageError):
    """
    Exception raised when a storage backend operation fails.

    This exception wraps backend-specific errors such as:
    - File system I/O errors
    - Network errors for remote storage
    - Permission errors
    - Backend service unavailable

    Args:
        message: Description of the backend error
        originalError: The original exception that caused this error (optional)
    """

    def __init__(self, message: str, originalError: Exception | None = None):
        """
        Initialize StorageBackendError with message and optional original error.

        Args:
            message: Description of the backend error
            originalError: The original exception that caused this error
        """
        super().__init__(message)
        self.originalError = originalError


class StorageNotFoundError(StorageBackendError):
    """
    Exception raised when the requested file or directory does not exist.

    Subclass of StorageBackendError, so generic handlers keep working.
    """

    pass
