"""
Configuration management for fshandler.
"""

import logging
import os
import re
from pathlib import Path
from typing import Any, Dict, List, Optional

import tomli

import fshandler.utils as utils

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """Raised when configuration files cannot be found or parsed"""

    pass


def replaceMatchToEnv(match: re.Match[str]) -> str:
    """Replace environment variable placeholders with actual values.

    Args:
        match: A regex match object containing the environment variable name.

    Returns:
        str: The value of the environment variable or the original placeholder
             if the variable is not set.
    """
    key = match.group(1)
    return os.getenv(key, match.group(0))


def substituteEnvVars(value: Any) -> Any:
    """Recursively substitute environment variable placeholders in configuration values.

    This function processes strings, dictionaries, and lists to replace placeholders
    in the format ${VAR_NAME} with their corresponding environment variable values.

    Args:
        value: The configuration value to process. Can be a string, dict, list, or other type.

    Returns:
        The processed value with environment variables substituted:
        - For strings: returns the string with placeholders replaced
        - For dictionaries: returns a new dict with substituted values
        - For lists: returns a new list with substituted items
        - For other types: returns the original value unchanged
    """
    if isinstance(value, str):
        return re.sub(r"\$\{([A-Za-z_][A-Za-z0-9_-]*)\}", replaceMatchToEnv, value)
    elif isinstance(value, dict):
        return {k: substituteEnvVars(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [substituteEnvVars(item) for item in value]
    return value


class ConfigManager:
    """Loads the TOML configuration once at startup; read-only afterwards."""

    def __init__(
        self, configPath: str = "config.toml", configDirs: Optional[List[str]] = None, dotEnvFile: str = ".env"
    ):
        """Initialize ConfigManager with config file path and optional config directories."""
        self.configPath = configPath
        self.configDirs = configDirs or []
        utils.loadDotEnv(path=dotEnvFile)
        self.config = substituteEnvVars(self._loadConfig())

    def _findTomlFilesRecursive(self, directory: str) -> List[Path]:
        """Recursively find all .toml files in a directory, dood!"""
        tomlFiles: List[Path] = []
        dirPath = Path(directory)

        if not dirPath.is_dir():
            logger.warning(f"Config directory {directory} does not exist or is not a directory, skipping, dood!")
            return tomlFiles

        for tomlFile in dirPath.rglob("*.toml"):
            if tomlFile.is_file():
                tomlFiles.append(tomlFile)
                logger.debug(f"Found config file: {tomlFile}")

        return sorted(tomlFiles)  # Sort for consistent ordering

    def _mergeConfigs(self, baseConfig: Dict[str, Any], newConfig: Dict[str, Any]) -> Dict[str, Any]:
        """Recursively merge two configuration dictionaries, dood!"""
        merged = baseConfig.copy()

        for key, value in newConfig.items():
            if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
                merged[key] = self._mergeConfigs(merged[key], value)
            else:
                merged[key] = value

        return merged

    def _loadConfig(self) -> Dict[str, Any]:
        """
        Load configuration from the main TOML file and optional config directories.

        Files found in config directories are merged over the main file in sorted order.

        Raises:
            ConfigError: If neither the main file nor any config directory is given,
                or a TOML file cannot be parsed
        """
        configFile = Path(self.configPath)
        hasConfigFile = configFile.exists()
        if not hasConfigFile and not self.configDirs:
            raise ConfigError(f"Configuration file {self.configPath} not found")

        config: Dict[str, Any] = {}
        if hasConfigFile:
            config = self._loadTomlFile(configFile)
            logger.info(f"Loaded main config from {self.configPath}")

        for configDir in self.configDirs:
            tomlFiles = self._findTomlFilesRecursive(configDir)
            logger.info(f"Found {len(tomlFiles)} .toml files in {configDir}")

            for tomlFile in tomlFiles:
                config = self._mergeConfigs(config, self._loadTomlFile(tomlFile))
                logger.info(f"Merged config from {tomlFile}")

        logger.info("Configuration loaded and merged successfully, dood!")
        return config

    @staticmethod
    def _loadTomlFile(path: Path) -> Dict[str, Any]:
        try:
            with open(path, "rb") as f:
                return tomli.load(f)
        except (OSError, tomli.TOMLDecodeError) as e:
            raise ConfigError(f"Failed to load config file {path}: {e}") from e

    def get(self, key: str, default=None) -> Any:
        """Get configuration value by key."""
        return self.config.get(key, default)

    def getLoggingConfig(self) -> Dict[str, Any]:
        """Get logging-specific configuration."""
        return self.get("logging", {})

    def getStorageConfig(self) -> Dict[str, Any]:
        """
        Get storage configuration.

        Returns a dictionary with the following structure:
        - type: Backend type ("local", "s3" or "objectstore")
        - local: Local backend configuration (if type is "local")
            - root-dir: Root directory of the tree
        - s3: S3 backend configuration (if type is "s3")
            - bucket: S3 bucket name
            - region: AWS region
            - key-id: Access key ID
            - key-secret: Secret access key
            - endpoint: Optional endpoint override (MinIO, LocalStack)
            - max-connections: Optional connection pool size
            - timeout: Optional timeout in seconds

        Returns:
            Dict[str, Any]: Storage configuration, empty dict if the section is missing.

        Example:
            {
                "type": "local",
                "local": {"root-dir": "./storage"}
            }
        """
        return self.get("storage", {})
