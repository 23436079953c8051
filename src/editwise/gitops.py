"""
Git helpers for the edit command: branch before editing, commit and push after.

editwise/src/editwise/gitops.py
"""

import logging
import subprocess
from pathlib import Path
from typing import List, Optional

from editwise.errors import GitOperationError

__all__ = ["run_git", "create_branch", "commit_file", "push"]

logger = logging.getLogger(__name__)


def run_git(args: List[str], cwd: Optional[Path] = None) -> str:
    """Run a git command and return its stdout.

    Raises:
        GitOperationError: If git is missing or exits non-zero.
    """
    command = ["git", *args]
    logger.debug(f"Running {' '.join(command)}")
    try:
        completed = subprocess.run(
            command, cwd=cwd, capture_output=True, text=True, check=True
        )
    except FileNotFoundError as e:
        raise GitOperationError("git executable not found") from e
    except subprocess.CalledProcessError as e:
        detail = (e.stderr or e.stdout or "").strip()
        raise GitOperationError(f"{' '.join(command)} failed: {detail}") from e
    return completed.stdout


def create_branch(name: str, cwd: Optional[Path] = None) -> None:
    run_git(["checkout", "-b", name], cwd=cwd)
    logger.info(f"Created and switched to branch {name}")


def commit_file(path: Path, message: str, cwd: Optional[Path] = None) -> None:
    run_git(["add", "--", str(path)], cwd=cwd)
    run_git(["commit", "-m", message], cwd=cwd)
    logger.info(f"Committed {path}: {message}")


def push(remote: str = "origin", ref: Optional[str] = None, cwd: Optional[Path] = None) -> None:
    run_git(["push", remote, ref or "HEAD"], cwd=cwd)
    logger.info(f"Pushed {ref or 'HEAD'} to {remote}")
