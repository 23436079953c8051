"""
Defensive parsing of oracle answers.

Oracle output is untrusted free text that should contain one JSON object.
Parsing is two-stage: the whole (fence-stripped) text first, then the first
balanced ``{...}`` span that decodes to an object. Whatever goes wrong, the
parse functions return a ``ParseResult``; a failed parse carries a valid
fallback value so downstream code can rely on the shape unconditionally.

editwise/src/editwise/parsing.py
"""

import json
import logging
import math
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Generic, Iterator, Optional, TypeVar

from editwise.errors import MalformedResponseError
from editwise.models import (
    AnalysisResult,
    CodeMetrics,
    CodeSuggestion,
    FileEditAnalysis,
    PerformanceRating,
    SecurityRating,
    SuggestionType,
)

__all__ = [
    "ParseStatus",
    "ParseResult",
    "strip_code_fences",
    "iter_balanced_objects",
    "extract_json_object",
    "parse_edit_response",
    "parse_analysis_response",
    "edit_fallback",
    "analysis_fallback",
    "default_metrics",
    "ANALYSIS_FAILED_RISK",
]

logger = logging.getLogger(__name__)

T = TypeVar("T")

ANALYSIS_FAILED_RISK = "Analysis failed - manual review recommended"
FALLBACK_COMPLEXITY = 5

_OUTER_FENCE_RE = re.compile(
    r"\A\s*```[A-Za-z0-9_+-]*[ \t]*\r?\n?(?P<body>.*?)\r?\n?```\s*\Z", re.DOTALL
)


class ParseStatus(Enum):
    OK = "ok"
    DEGRADED = "degraded"


@dataclass(frozen=True)
class ParseResult(Generic[T]):
    """Tagged parse outcome: either the parsed value or a degraded fallback."""

    status: ParseStatus
    value: T
    error: Optional[str] = None

    @classmethod
    def ok(cls, value: T) -> "ParseResult[T]":
        return cls(ParseStatus.OK, value)

    @classmethod
    def degraded(cls, fallback: T, error: str) -> "ParseResult[T]":
        return cls(ParseStatus.DEGRADED, fallback, error)

    @property
    def is_ok(self) -> bool:
        return self.status is ParseStatus.OK


def strip_code_fences(text: str) -> str:
    """Remove a Markdown fence (```json ... ```) wrapping the whole text.

    Fences inside the answer are left alone; they may be part of the content.
    """
    match = _OUTER_FENCE_RE.match(text)
    if match:
        return match.group("body").strip()
    return text.strip()


def iter_balanced_objects(text: str) -> Iterator[str]:
    """Yield balanced ``{...}`` spans in order of their opening brace.

    Braces inside JSON string literals are ignored.
    """
    start = text.find("{")
    while start != -1:
        depth = 0
        in_string = False
        escaped = False
        for idx in range(start, len(text)):
            char = text[idx]
            if in_string:
                if escaped:
                    escaped = False
                elif char == "\\":
                    escaped = True
                elif char == '"':
                    in_string = False
            elif char == '"':
                in_string = True
            elif char == "{":
                depth += 1
            elif char == "}":
                depth -= 1
                if depth == 0:
                    yield text[start : idx + 1]
                    break
        start = text.find("{", start + 1)


def extract_json_object(text: Optional[str]) -> Dict[str, Any]:
    """Extract the JSON object from oracle text.

    Raises:
        MalformedResponseError: If no JSON object can be recovered.
    """
    if not isinstance(text, str) or not text.strip():
        raise MalformedResponseError("Oracle returned no text")

    cleaned = strip_code_fences(text)
    try:
        parsed = json.loads(cleaned)
        if isinstance(parsed, dict):
            return parsed
    except json.JSONDecodeError:
        pass
    except RecursionError:
        raise MalformedResponseError("Oracle response is nested too deeply") from None

    for candidate_text in (cleaned, text):
        for span in iter_balanced_objects(candidate_text):
            try:
                parsed = json.loads(span)
            except json.JSONDecodeError:
                continue
            except RecursionError:
                raise MalformedResponseError("Oracle response is nested too deeply") from None
            if isinstance(parsed, dict):
                logger.debug("Recovered JSON object from surrounding prose")
                return parsed

    raise MalformedResponseError("No JSON object found in oracle response")


def edit_fallback(language: str) -> FileEditAnalysis:
    """Minimal safe edit analysis used when the oracle answer is unusable."""
    return FileEditAnalysis(
        language=language,
        complexity=FALLBACK_COMPLEXITY,
        suggestions=[],
        risks=[ANALYSIS_FAILED_RISK],
        dependencies=[],
    )


def default_metrics() -> CodeMetrics:
    return CodeMetrics(
        complexity=5,
        maintainability_index=70,
        performance=PerformanceRating.GOOD,
        security=SecurityRating.MODERATE,
    )


def analysis_fallback(file_path: str) -> AnalysisResult:
    """Basic review used when the oracle answer cannot be parsed."""
    return AnalysisResult(
        file=file_path,
        issues=[],
        suggestions=[
            CodeSuggestion(
                line=1,
                type=SuggestionType.DOCUMENTATION,
                description="Consider adding comprehensive documentation for this code",
            )
        ],
        metrics=default_metrics(),
    )


def _clamp_complexity(value: Any) -> Any:
    if isinstance(value, float) and not math.isfinite(value):
        raise MalformedResponseError(f"Complexity {value} is not a finite number")
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return min(10, max(1, int(round(value))))
    return value


def parse_edit_response(text: Optional[str], language: str) -> ParseResult[FileEditAnalysis]:
    """Parse an edit answer; never raises.

    A missing language falls back to the classified one and complexity is
    clamped to 1-10. Missing suggestions, or any malformed suggestion entry,
    degrade the whole answer.
    """
    try:
        data = extract_json_object(text)
        if not isinstance(data.get("suggestions"), list):
            raise MalformedResponseError("Response has no 'suggestions' list")
        if not data.get("language"):
            data["language"] = language
        if "complexity" in data:
            data["complexity"] = _clamp_complexity(data["complexity"])
        return ParseResult.ok(FileEditAnalysis.model_validate(data))
    except (MalformedResponseError, ValueError, TypeError) as e:
        logger.warning(f"Could not parse edit analysis: {e}")
        return ParseResult.degraded(edit_fallback(language), str(e))


def parse_analysis_response(text: Optional[str], file_path: str) -> ParseResult[AnalysisResult]:
    """Parse a code-quality answer; never raises.

    Missing issues or suggestions default to empty lists and missing metric
    keys default to neutral values. Malformed entries degrade the answer.
    """
    try:
        data = extract_json_object(text)
        metrics = default_metrics().model_dump(by_alias=True)
        reported = data.get("metrics")
        if isinstance(reported, dict):
            metrics.update({k: v for k, v in reported.items() if v is not None})
        elif reported is not None:
            raise MalformedResponseError("'metrics' is not an object")

        result = AnalysisResult.model_validate(
            {
                "file": file_path,
                "issues": data.get("issues") or [],
                "suggestions": data.get("suggestions") or [],
                "metrics": metrics,
            }
        )
        return ParseResult.ok(result)
    except (MalformedResponseError, ValueError, TypeError) as e:
        logger.warning(f"Could not parse analysis for {file_path}: {e}")
        return ParseResult.degraded(analysis_fallback(file_path), str(e))
