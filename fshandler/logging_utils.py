"""
Logging utilities for fshandler.

Configuration comes from the [logging] table of the config file:

    level          root level name (default INFO)
    format         logging.Formatter format string
    console        log to stderr
    console-level  level for the console handler only
    file           log file path, parent directories are created
    file-level     level for the file handler only
    rotate         rotate the file at midnight, keeping a week of backups
    propagate      whether records reach the parent logger
    logger.<name>  the same keys, applied to one named logger
"""

import logging
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Chatty third-party loggers raised to WARNING unless configured otherwise
NOISY_LOGGERS = ("botocore", "boto3", "urllib3", "s3transfer")

ROTATE_BACKUP_COUNT = 7


def getLogLevelByStr(levelStr: str, default: Optional[int] = None) -> Optional[int]:
    """Get log level by string."""
    level = getattr(logging, levelStr.upper(), None)
    if not isinstance(level, int):
        logger.error(f"Invalid log level '{levelStr}'")
        return default
    return level


def _handlerLevel(config: Dict[str, Any], key: str, fallback: int) -> int:
    """Level for one handler: its own `<key>` setting, else the logger's level"""
    if key not in config:
        return fallback
    level = getLogLevelByStr(config[key])
    return fallback if level is None else level


def _openLogFile(logFile: str, rotate: bool) -> logging.Handler:
    Path(logFile).parent.mkdir(parents=True, exist_ok=True)
    if rotate:
        return TimedRotatingFileHandler(
            filename=logFile,
            when="midnight",
            interval=1,
            backupCount=ROTATE_BACKUP_COUNT,
            encoding="utf-8",
        )
    return logging.FileHandler(logFile, encoding="utf-8")


def configureLogger(localLogger: logging.Logger, config: Dict[str, Any]) -> None:
    """Configure individual logger from config file settings."""
    if "propagate" in config:
        localLogger.propagate = bool(config["propagate"])

    if "level" in config:
        level = getLogLevelByStr(config["level"])
        if level is not None:
            localLogger.setLevel(level)
    loggerLevel = localLogger.getEffectiveLevel()

    formatter = logging.Formatter(config.get("format", DEFAULT_FORMAT))

    # Reconfiguring must not stack handlers
    for oldHandler in localLogger.handlers[:]:
        localLogger.removeHandler(oldHandler)

    handlers: Dict[str, logging.Handler] = {}
    if config.get("console", False):
        handlers["console"] = logging.StreamHandler()

    logFile = config.get("file")
    if logFile:
        try:
            handlers["file"] = _openLogFile(str(logFile), bool(config.get("rotate", False)))
        except OSError as e:
            logger.error(f"Failed to setup file logging for {localLogger.name}: {e}")

    for kind, handler in handlers.items():
        handlerLevel = _handlerLevel(config, f"{kind}-level", loggerLevel)
        handler.setLevel(handlerLevel)
        handler.setFormatter(formatter)
        localLogger.addHandler(handler)
        target = logFile if kind == "file" else "console"
        logger.info(f"Logging {localLogger.name} to {target}, logLevel: {handlerLevel}")


def initLogging(config: Dict[str, Any]) -> None:
    """Configure logging from config file settings."""
    rootLogger = logging.getLogger()
    rootLogger.setLevel(logging.INFO)

    configureLogger(rootLogger, config)
    rootLevel = rootLogger.getEffectiveLevel()

    # AWS SDK logs every request at DEBUG/INFO
    if rootLevel < logging.WARNING:
        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    for loggerName, loggerConfig in config.get("logger", {}).items():
        logger.debug(f"Configuring logger '{loggerName}' with config {loggerConfig}")
        configureLogger(logging.getLogger(loggerName), loggerConfig)

    logger.info(f"Logging configured: root level={rootLevel}")
