"""
Storage utility functions

This module provides path validation and normalization shared by all backends,
plus small helpers for building and applying listing filters.
"""

import fnmatch
import re
from typing import Iterable, List, Optional

from .exceptions import StoragePathError
from .models import FileMetadata, MetadataFilter

# Windows drive-letter absolute path, e.g. C:\data or C:/data
DRIVE_LETTER_PATTERN = re.compile(r"^[A-Za-z]:[\\/]")

# Segment splitter: both separators count when looking for traversal
SEGMENT_SPLIT_PATTERN = re.compile(r"[\\/]")


def validatePath(path: Optional[str], allowRoot: bool = False) -> str:
    """
    Validate a caller-supplied relative path and return its normalized form.

    Validation rules, applied before any backend is touched:
    1. None, empty or "." means the root; allowed only when allowRoot is set
       (read-type operations such as list and getMetadata)
    2. Paths starting with / or \\ are rejected
    3. Drive-letter absolute paths (C:\\...) are rejected
    4. Any .. segment is rejected
    5. Null bytes and other control characters are rejected

    Normalization drops empty and "." segments and joins the rest with "/".
    A trailing slash on the input is kept as a directory hint.

    Args:
        path: The path to validate
        allowRoot: Whether an empty path (the root) is acceptable

    Returns:
        The normalized path ("" for the root)

    Raises:
        StoragePathError: If the path is rejected

    Examples:
        >>> validatePath("docs//./a.txt")
        'docs/a.txt'
        >>> validatePath("tmp/")
        'tmp/'
        >>> validatePath("", allowRoot=True)
        ''
    """
    if path is None or path in ("", "."):
        if allowRoot:
            return ""
        raise StoragePathError("Path must not be empty")

    if path.startswith("/") or path.startswith("\\") or DRIVE_LETTER_PATTERN.match(path):
        raise StoragePathError(f"Invalid path '{path}': absolute paths are not allowed")

    if any(ord(char) < 32 or ord(char) == 127 for char in path):
        raise StoragePathError(f"Invalid path {path!r}: control characters are not allowed")

    if ".." in SEGMENT_SPLIT_PATTERN.split(path):
        raise StoragePathError(f"Invalid path '{path}': path traversal is not allowed")

    segments = [segment for segment in path.split("/") if segment not in ("", ".")]
    normalized = "/".join(segments)
    if not normalized:
        if allowRoot:
            return ""
        raise StoragePathError("Path must not be empty")

    if path.endswith("/"):
        normalized += "/"
    return normalized


def validateFilePath(path: Optional[str]) -> str:
    """
    Validate a path that must name a file, not a directory.

    Raises:
        StoragePathError: If the path is invalid or ends with a slash
    """
    normalized = validatePath(path)
    if normalized.endswith("/"):
        raise StoragePathError(f"File path must not end with '/': '{path}'")
    return normalized


def isInside(path: str, parent: str) -> bool:
    """
    Whether normalized path lies strictly below parent.

    >>> isInside("docs/sub/a.txt", "docs")
    True
    >>> isInside("docs2", "docs")
    False
    """
    parent = parent.rstrip("/")
    return path.rstrip("/").startswith(parent + "/")


def validateNewName(newName: Optional[str]) -> str:
    """
    Validate the new name passed to rename.

    Args:
        newName: The new final path segment

    Returns:
        The name unchanged

    Raises:
        StoragePathError: If the name is empty, contains .. or contains /
    """
    if not newName or ".." in newName or "/" in newName:
        raise StoragePathError(f"Invalid new name: {newName!r}")
    return newName


def parentPrefix(path: str) -> str:
    """
    Return the text of the path up to and including its last slash.

    A top-level path has an empty parent prefix, so renaming it targets the root.

    >>> parentPrefix("docs/a.txt")
    'docs/'
    >>> parentPrefix("a.txt")
    ''
    """
    return path[: path.rfind("/") + 1]


def baseName(path: str) -> str:
    """Return the final segment of a slash-separated path"""
    return path.rstrip("/").rsplit("/", 1)[-1]


def globFilter(pattern: str) -> MetadataFilter:
    """
    Build a listing filter matching entry names against a shell-style glob.

    Args:
        pattern: Glob such as "*.txt" or "report-??.csv"

    Returns:
        Predicate accepting FileMetadata whose name matches the pattern
    """

    def _matches(metadata: FileMetadata) -> bool:
        return fnmatch.fnmatchcase(metadata.name, pattern)

    return _matches


def applyFilter(entries: Iterable[FileMetadata], filter: Optional[MetadataFilter]) -> List[FileMetadata]:
    """Apply an optional listing filter, passing everything through when absent"""
    if filter is None:
        return list(entries)
    return [entry for entry in entries if filter(entry)]
