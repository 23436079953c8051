"""
File discovery routines for editwise.

Walks a directory tree and returns the code files the analyzer should look
at. Hidden directories and dependency caches are pruned before descending;
files are kept by extension (see ``editwise.languages.CODE_EXTENSIONS``).

editwise/discovery.py
"""

import logging
import time
from pathlib import Path
from typing import Iterable, List, Optional, Set

from .errors import TargetNotFoundError
from .languages import is_code_file

__all__ = ["discover_code_files", "DEPENDENCY_CACHE_DIRS"]
logger = logging.getLogger(__name__)


DEPENDENCY_CACHE_DIRS = frozenset({"node_modules"})


def _is_pruned_dir(name: str, extra_excludes: Set[str]) -> bool:
    """
    Checks if a directory entry should not be descended into.

    Hidden directories (leading '.') and dependency caches are always pruned;
    extra_excludes holds names from [tool.editwise] exclude_dirs.

    editwise/discovery.py
    """
    return name.startswith(".") or name in DEPENDENCY_CACHE_DIRS or name in extra_excludes


def _walk(directory: Path, extra_excludes: Set[str], found: List[Path]) -> None:
    try:
        entries = sorted(directory.iterdir(), key=lambda p: p.name)
    except PermissionError as e:
        logger.warning(f"Permission denied reading {directory}: {e}. Skipping.")
        return
    except OSError as e:
        logger.warning(f"Could not list {directory}: {e}. Skipping.")
        return

    for entry in entries:
        if entry.is_symlink():
            logger.debug(f"  -> Skipping symlink: {entry}")
            continue
        if entry.is_dir():
            if _is_pruned_dir(entry.name, extra_excludes):
                logger.debug(f"  -> Pruning directory: {entry}")
                continue
            _walk(entry, extra_excludes, found)
        elif entry.is_file() and is_code_file(entry):
            logger.debug(f"  -> Adding candidate: {entry}")
            found.append(entry)


def discover_code_files(root: Path, exclude_dirs: Optional[Iterable[str]] = None) -> List[Path]:
    """
    Discovers the code files under root.

    A root that names a regular file is returned as-is, whatever its
    extension, so an explicitly named file can always be analyzed.

    Args:
    root: File or directory to discover from.
    exclude_dirs: Additional directory names to prune.

    Returns:
    A sorted list of discovered paths (paths are joined onto root, not
    resolved).

    Raises:
    TargetNotFoundError: If root does not exist.

    editwise/discovery.py
    """
    if not root.exists():
        raise TargetNotFoundError(root)

    if root.is_file():
        return [root]

    extra_excludes = set(exclude_dirs or [])
    start_time = time.time()
    found: List[Path] = []

    logger.debug(f"Starting file discovery from: {root}")
    _walk(root, extra_excludes, found)

    discovery_time = time.time() - start_time
    logger.debug(f"Discovery found {len(found)} files in {discovery_time:.4f} seconds.")
    return sorted(found, key=lambda p: str(p))
