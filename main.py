"""
fshandler - command line access to the configured file storage (local tree or S3).
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import shutil
import sys
from typing import List, Optional

from fshandler.config.manager import ConfigError, ConfigManager
from fshandler.logging_utils import initLogging
from fshandler.storage import FileMetadata, StorageError, StoragePathError, StorageService

# Configure basic logging first
logging.basicConfig(format="%(asctime)s - %(name)s - %(levelname)s - %(message)s", level=logging.WARNING)
logger = logging.getLogger(__name__)


def formatEntry(metadata: FileMetadata) -> str:
    """Format one metadata record as a listing line."""
    kind = "d" if metadata.isDirectory else "-"
    modified = metadata.lastModifiedTime.isoformat(timespec="seconds") if metadata.lastModifiedTime else "-"
    return f"{kind} {metadata.size:>12} {modified:>25} {metadata.path}"


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="fshandler - one storage contract over a local tree or S3, dood!")
    parser.add_argument(
        "-c",
        "--config",
        default="config.toml",
        help="Path to configuration file (default: config.toml)",
    )
    parser.add_argument(
        "--config-dir",
        action="append",
        help="Directory to search for .toml config files recursively (can be specified multiple times)",
    )
    parser.add_argument(
        "--print-config",
        action="store_true",
        help="Pretty-print loaded configuration and exit",
    )

    commands = parser.add_subparsers(dest="command")

    lsParser = commands.add_parser("ls", help="List a directory")
    lsParser.add_argument("path", nargs="?", default="")
    lsParser.add_argument("-r", "--recursive", action="store_true", help="List the whole subtree")
    lsParser.add_argument("--glob", help="Filter entry names, e.g. '*.txt'")

    for name, helpText in (
        ("stat", "Show metadata of a file or directory"),
        ("cat", "Write file content to stdout"),
        ("mkdir", "Create a directory"),
        ("touch", "Create an empty file"),
        ("rm", "Delete a file or directory"),
    ):
        commands.add_parser(name, help=helpText).add_argument("path")

    putParser = commands.add_parser("put", help="Write a file from SRC (or stdin)")
    putParser.add_argument("path")
    putParser.add_argument("source", nargs="?", help="Local file to upload (default: stdin)")

    mvParser = commands.add_parser("mv", help="Move a file or directory")
    mvParser.add_argument("source")
    mvParser.add_argument("destination")

    renameParser = commands.add_parser("rename", help="Rename a file or directory in place")
    renameParser.add_argument("path")
    renameParser.add_argument("newName")

    commands.add_parser("health", help="Check backend health")

    args = parser.parse_args(argv)
    args.config = os.path.abspath(args.config)
    if args.config_dir:
        args.config_dir = [os.path.abspath(dirPath) for dirPath in args.config_dir]
    if args.command is None and not args.print_config:
        parser.error("a command is required")
    return args


def prettyPrintConfig(configManager: ConfigManager) -> None:
    """Pretty-print the loaded configuration."""
    print(json.dumps(configManager.config, indent=2, ensure_ascii=False, sort_keys=True, default=str))


def runCommand(storage: StorageService, args: argparse.Namespace) -> int:
    """Execute one storage command and return the process exit code."""
    match args.command:
        case "ls":
            if args.recursive:
                entries = storage.listRecursive(args.path, args.glob)
            else:
                entries = storage.list(args.path, args.glob)
            for entry in entries:
                print(formatEntry(entry))
        case "stat":
            print(formatEntry(storage.getMetadata(args.path)))
        case "cat":
            with storage.readFile(args.path) as stream:
                shutil.copyfileobj(stream, sys.stdout.buffer)
            sys.stdout.flush()
        case "put":
            with storage.writeFile(args.path) as stream:
                if args.source:
                    with open(args.source, "rb") as source:
                        shutil.copyfileobj(source, stream)
                else:
                    shutil.copyfileobj(sys.stdin.buffer, stream)
            print(formatEntry(storage.getMetadata(args.path)))
        case "mkdir":
            print(formatEntry(storage.createDirectory(args.path)))
        case "touch":
            print(formatEntry(storage.createFile(args.path)))
        case "mv":
            print(formatEntry(storage.move(args.source, args.destination)))
        case "rename":
            print(formatEntry(storage.rename(args.path, args.newName)))
        case "rm":
            storage.delete(args.path)
        case "health":
            healthy = storage.isHealthy()
            print("healthy" if healthy else "unhealthy")
            return 0 if healthy else 1
        case _:
            raise ValueError(f"Unknown command: {args.command}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = parse_arguments(argv)

    try:
        configManager = ConfigManager(configPath=args.config, configDirs=args.config_dir)
    except ConfigError as e:
        logger.error(f"Failed to load configuration: {e}")
        return 1

    if args.print_config:
        prettyPrintConfig(configManager)
        return 0

    initLogging(configManager.getLoggingConfig())

    storage = StorageService.getInstance()
    try:
        storage.injectConfig(configManager)
        return runCommand(storage, args)
    except StoragePathError as e:
        logger.error(f"Invalid path: {e}")
        return 2
    except StorageError as e:
        logger.error(f"Storage operation failed: {e}")
        return 1
    finally:
        storage.shutdown()


if __name__ == "__main__":
    sys.exit(main())
