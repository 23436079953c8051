"""
Confidence gating for edit suggestions.

editwise/src/editwise/suggestions.py
"""

import logging
from typing import List, Sequence

from editwise.config import DEFAULT_CONFIDENCE_THRESHOLD
from editwise.models import EditSuggestion, FileEditAnalysis

__all__ = ["is_acceptable", "filter_suggestions", "apply_suggestion_filter"]

logger = logging.getLogger(__name__)


def is_acceptable(
    suggestion: EditSuggestion, threshold: int = DEFAULT_CONFIDENCE_THRESHOLD
) -> bool:
    """A suggestion is usable when confident enough and has lines on both sides."""
    return (
        suggestion.confidence >= threshold
        and len(suggestion.original_lines) > 0
        and len(suggestion.suggested_lines) > 0
    )


def filter_suggestions(
    suggestions: Sequence[EditSuggestion], threshold: int = DEFAULT_CONFIDENCE_THRESHOLD
) -> List[EditSuggestion]:
    """Keep acceptable suggestions, preserving their order."""
    kept = [s for s in suggestions if is_acceptable(s, threshold)]
    dropped = len(suggestions) - len(kept)
    if dropped:
        logger.debug(f"Dropped {dropped} suggestion(s) below confidence {threshold} or empty")
    return kept


def apply_suggestion_filter(
    analysis: FileEditAnalysis, threshold: int = DEFAULT_CONFIDENCE_THRESHOLD
) -> FileEditAnalysis:
    """Return a copy of analysis whose suggestion list is the filtered subset."""
    return analysis.model_copy(
        update={"suggestions": filter_suggestions(analysis.suggestions, threshold)}
    )
