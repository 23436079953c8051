"""
Exception hierarchy for editwise.

Only root-level failures (missing target, bad configuration) are meant to
reach the user. Oracle and parse failures are caught at the file boundary and
turned into degraded results.

editwise/src/editwise/errors.py
"""

from pathlib import Path
from typing import Optional

__all__ = [
    "EditwiseError",
    "TargetNotFoundError",
    "ConfigurationError",
    "OracleError",
    "OracleUnavailableError",
    "OracleFailureError",
    "OracleCancelledError",
    "MalformedResponseError",
    "ContextFileUnreadableError",
    "GitOperationError",
]


class EditwiseError(Exception):
    """Base class for all editwise errors."""


class TargetNotFoundError(EditwiseError):
    """The file or directory to edit or analyze does not exist."""

    def __init__(self, path: Path):
        self.path = path
        super().__init__(f'File "{path}" not found.')


class ConfigurationError(EditwiseError):
    """Invalid values in [tool.editwise]."""


class OracleError(EditwiseError):
    """Base class for advisory oracle failures."""


class OracleUnavailableError(OracleError):
    """The oracle is not configured or could not be reached."""


class OracleFailureError(OracleError):
    """The oracle answered, but with nothing usable."""


class OracleCancelledError(OracleError):
    """The oracle call was aborted through its abort signal."""


class MalformedResponseError(EditwiseError):
    """Oracle text does not contain the expected JSON structure."""


class ContextFileUnreadableError(EditwiseError):
    """An auxiliary context file could not be read."""

    def __init__(self, path: Path, reason: Optional[str] = None):
        self.path = path
        self.reason = reason
        message = f"Could not read context file: {path}"
        if reason:
            message += f" ({reason})"
        super().__init__(message)


class GitOperationError(EditwiseError):
    """A git command run on behalf of the edit flow failed."""
