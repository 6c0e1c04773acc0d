"""
Common utilities for fshandler.
"""

import logging
import os
from typing import Dict

logger = logging.getLogger(__name__)


def loadDotEnv(path: str = ".env", populateEnv: bool = True) -> Dict[str, str]:
    """
    Simple dotenv file loader.
    Just read file line by line and put key-value pairs into dictionary.
    Comments and blank lines are skipped, a missing file yields an empty dictionary.

    Args:
        path: Path to .env file (default ".env")
        populateEnv: Whether to populate environment variables (default True)

    Returns:
        Dictionary of key-value pairs from .env file
    """
    ret: Dict[str, str] = {}
    if not os.path.isfile(path):
        logger.debug(f"No dotenv file at {path}")
        return ret

    with open(path, "rt") as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            key, value = line.split("=", 1)
            ret[key.strip()] = value.strip().strip('"')

    if populateEnv:
        for k, v in ret.items():
            os.environ.setdefault(k, v)
    return ret
