"""
Shared console utilities for editwise.

Provides a centralized Rich Console instance to avoid duplication.

editwise/src/editwise/console_utils.py
"""

from rich.console import Console

__all__ = ["console"]

# Global console instance used throughout editwise
console = Console()
