"""
Safe application of line-range edit suggestions.

Suggestions address line numbers of the original, unmodified file. They are
applied bottom-up (highest start line first) so that a splice never shifts
the indices of a range that has not been applied yet. A suggestion whose
range does not fit the current line sequence is skipped whole, never applied
partially.

editwise/src/editwise/apply.py
"""

import logging
from dataclasses import dataclass, field
from typing import List, Sequence, Tuple

from editwise.models import EditSuggestion

__all__ = [
    "ApplyResult",
    "apply_suggestions",
    "apply_edits",
    "split_content",
    "render_lines",
]

logger = logging.getLogger(__name__)


@dataclass
class ApplyResult:
    """Outcome of applying a batch of suggestions to a line sequence."""

    lines: List[str]
    applied: List[EditSuggestion] = field(default_factory=list)
    skipped: List[EditSuggestion] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.applied)


def split_content(content: str) -> List[str]:
    """Split content into lines on LF, the numbering the oracle sees.

    A CRLF line keeps its trailing ``\\r``, so mixed endings survive a round
    trip and a trailing newline produces a final empty element:
    ``render_lines(split_content(c)) == c`` for every c.
    """
    return content.split("\n")


def render_lines(lines: Sequence[str]) -> str:
    return "\n".join(lines)


def _match_line_endings(replaced: Sequence[str], suggested: Sequence[str]) -> List[str]:
    """Give suggested lines the carriage returns of the lines they replace.

    Every inserted line takes the ending of the first replaced line, except
    the last, which takes the ending of the last replaced line.
    """
    if not suggested:
        return []
    first_cr = replaced[0].endswith("\r")
    last_cr = replaced[-1].endswith("\r")
    matched = []
    for idx, line in enumerate(suggested):
        wants_cr = last_cr if idx == len(suggested) - 1 else first_cr
        bare = line[:-1] if line.endswith("\r") else line
        matched.append(bare + "\r" if wants_cr else bare)
    return matched


def apply_suggestions(lines: Sequence[str], suggestions: Sequence[EditSuggestion]) -> ApplyResult:
    """Apply suggestions to lines without index drift.

    The input sequence is not modified. Suggestions are sorted by start_line
    descending (ties keep their given order) and each inclusive range is
    replaced by its suggested_lines when ``0 <= start <= end < len(current)``
    holds against the current, partially modified sequence.

    Overlapping ranges resolve in favour of the higher start line; the lower
    one is then checked against the shifted sequence and skipped if its
    original bounds no longer fit.
    """
    result = ApplyResult(lines=list(lines))
    ordered = sorted(suggestions, key=lambda s: s.start_line, reverse=True)

    for suggestion in ordered:
        start_idx = suggestion.start_line - 1
        end_idx = suggestion.end_line - 1

        if 0 <= start_idx <= end_idx < len(result.lines):
            replaced = result.lines[start_idx : end_idx + 1]
            result.lines[start_idx : end_idx + 1] = _match_line_endings(
                replaced, suggestion.suggested_lines
            )
            result.applied.append(suggestion)
        else:
            logger.debug(
                f"Skipping out-of-range suggestion for lines "
                f"{suggestion.start_line}-{suggestion.end_line} "
                f"(file currently has {len(result.lines)} lines)"
            )
            result.skipped.append(suggestion)

    return result


def apply_edits(content: str, suggestions: Sequence[EditSuggestion]) -> Tuple[str, ApplyResult]:
    """Apply suggestions to full file content, keeping each line's ending."""
    result = apply_suggestions(split_content(content), suggestions)
    return render_lines(result.lines), result
