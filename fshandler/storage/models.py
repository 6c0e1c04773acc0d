"""
Storage data models
"""

import datetime
from dataclasses import dataclass
from typing import Callable, Optional

# Reported size of directories on every backend
DIRECTORY_SIZE = 0


@dataclass(frozen=True)
class FileMetadata:
    """Snapshot of file or directory attributes, created fresh on every query"""

    name: str  # Final path segment, "" for the root
    path: str  # Relative, forward-slash, no leading or trailing slash
    size: int
    creationTime: Optional[datetime.datetime]
    lastModifiedTime: Optional[datetime.datetime]
    isDirectory: bool


MetadataFilter = Callable[[FileMetadata], bool]
