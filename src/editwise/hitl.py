"""
Human-in-the-loop confirmation gate.

editwise/src/editwise/hitl.py
"""

import logging
import sys
from typing import Callable

import click

from editwise.console_utils import console

__all__ = ["ConfirmFn", "confirm_proceed", "auto_confirm", "auto_decline"]

logger = logging.getLogger(__name__)

ConfirmFn = Callable[[str], bool]


def confirm_proceed(prompt: str, assume_yes: bool = False, default: bool = False) -> bool:
    """Ask the user to accept or reject.

    With assume_yes the prompt is skipped. When stdin is not a terminal the
    default is returned without prompting, so automated runs decline unless
    told otherwise.
    """
    if assume_yes:
        logger.debug(f"Auto-confirmed: {prompt}")
        return True
    if not sys.stdin.isatty():
        if not default:
            console.print(
                "[yellow]Non-interactive session detected. Use --yes to bypass confirmation.[/yellow]"
            )
        logger.info(f"Non-interactive session, using default answer {default} for: {prompt}")
        return default
    return click.confirm(prompt, default=default)


def auto_confirm(prompt: str) -> bool:
    return True


def auto_decline(prompt: str) -> bool:
    return False
