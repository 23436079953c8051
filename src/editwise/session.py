"""
Session journal for edit and analysis runs.

Each run appends one JSON line to ``<working_dir>/.editwise/sessions.jsonl``.
Recording is a side notification: failures are logged and never raised.

editwise/src/editwise/session.py
"""

import json
import logging
import time
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from editwise.config import SessionSettings
from editwise.utils import ensure_directory

__all__ = ["SessionRecord", "record_session", "session_log_path"]

logger = logging.getLogger(__name__)

SESSION_DIR = ".editwise"
SESSION_FILE = "sessions.jsonl"


@dataclass
class SessionRecord:
    """One journal line."""

    session_id: str
    kind: str
    target: str
    model: str
    timestamp: str = field(default_factory=lambda: time.strftime("%Y-%m-%d %H:%M:%S"))
    details: Dict[str, Any] = field(default_factory=dict)


def session_log_path(working_directory: Path) -> Path:
    return working_directory / SESSION_DIR / SESSION_FILE


def record_session(
    settings: SessionSettings,
    kind: str,
    target: Path,
    details: Optional[Dict[str, Any]] = None,
) -> Optional[Path]:
    """Append a session record; returns the journal path, or None on failure."""
    record = SessionRecord(
        session_id=settings.session_id,
        kind=kind,
        target=str(target),
        model=settings.model,
        details=details or {},
    )
    log_path = session_log_path(settings.working_directory)
    try:
        ensure_directory(log_path.parent)
        with open(log_path, "a", encoding="utf-8") as f:
            f.write(json.dumps(asdict(record), default=str) + "\n")
    except OSError as e:
        logger.warning(f"Could not record session in {log_path}: {e}")
        return None

    logger.debug(f"Recorded {kind} session for {target} in {log_path}")
    return log_path
