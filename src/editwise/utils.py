"""
Utility functions for editwise.

src/editwise/utils.py
"""

import logging
import time
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

__all__ = [
    "walk_up_for_config",
    "find_project_root",
    "ensure_directory",
    "read_text",
    "write_text",
    "backup_path_for",
    "create_backup",
]

_PROJECT_MARKERS = ("pyproject.toml", ".git")


def walk_up_for_config(start_path: Path) -> Optional[Path]:
    """
    Find the nearest directory at or above start_path holding a pyproject.toml.

    Args:
        start_path: File or directory to start the search from

    Returns:
        Directory containing pyproject.toml, or None if none was found

    src/editwise/utils.py
    """
    current = start_path.resolve()
    if current.is_file():
        current = current.parent

    while True:
        if (current / "pyproject.toml").is_file():
            return current
        if current.parent == current:
            return None
        current = current.parent


def find_project_root(start_path: Path) -> Optional[Path]:
    """
    Find the project root by looking for pyproject.toml or a .git directory.

    Args:
        start_path: File or directory to start the search from

    Returns:
        The first ancestor (or start_path itself) carrying a project marker

    src/editwise/utils.py
    """
    current = start_path.resolve()
    if current.is_file():
        current = current.parent

    for candidate in [current] + list(current.parents):
        if any((candidate / marker).exists() for marker in _PROJECT_MARKERS):
            return candidate
    return None


def ensure_directory(path: Path) -> Path:
    """
    Ensure a directory exists, creating it if necessary.

    src/editwise/utils.py
    """
    path.mkdir(parents=True, exist_ok=True)
    return path


def read_text(file_path: Path, encoding: str = "utf-8") -> str:
    """Read a file keeping its line separators untouched."""
    with open(file_path, "r", encoding=encoding, newline="") as f:
        return f.read()


def write_text(file_path: Path, content: str, encoding: str = "utf-8") -> None:
    """Write content without translating line separators."""
    with open(file_path, "w", encoding=encoding, newline="") as f:
        f.write(content)


def backup_path_for(file_path: Path, timestamp_ms: Optional[int] = None) -> Path:
    """Name of the backup copy: ``<file>.backup.<epoch milliseconds>``."""
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    return file_path.with_name(f"{file_path.name}.backup.{timestamp_ms}")


def create_backup(file_path: Path, content: str) -> Path:
    """
    Write a timestamped copy of the pre-modification content next to file_path.

    Returns:
        Path of the backup file

    Raises:
        OSError: If the backup cannot be written. Callers must not overwrite
        the original in that case.

    src/editwise/utils.py
    """
    backup_path = backup_path_for(file_path)
    write_text(backup_path, content)
    logger.debug(f"Wrote backup of {file_path} to {backup_path}")
    return backup_path
