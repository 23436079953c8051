"""
Directory-scale code-quality analysis.

Files are analyzed one at a time. A failure while reading or analyzing one
file is contained in that file's result; the batch always completes and the
summary is computed over every result, failed files included.

editwise/src/editwise/analyzer.py
"""

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional

from editwise.config import SessionSettings
from editwise.discovery import discover_code_files
from editwise.hitl import ConfirmFn
from editwise.languages import language_for_path
from editwise.llm_client import Oracle
from editwise.models import (
    AnalysisResult,
    CodeIssue,
    CodeMetrics,
    IssueType,
    PerformanceRating,
    SecurityRating,
)
from editwise.parsing import parse_analysis_response
from editwise.prompts import build_analysis_request
from editwise.session import record_session
from editwise.utils import read_text

__all__ = [
    "AnalysisStatus",
    "FileAnalysis",
    "AnalysisSummary",
    "AnalysisReport",
    "AutoFixOutcome",
    "FIXABLE_ISSUE_TYPES",
    "neutral_result",
    "analyze_file",
    "analyze_file_detailed",
    "analyze_codebase",
    "summarize",
    "collect_fixable_issues",
    "apply_auto_fixes",
]

logger = logging.getLogger(__name__)

FIXABLE_ISSUE_TYPES = frozenset({IssueType.STYLE, IssueType.MAINTAINABILITY})
AUTO_FIX_PROMPT = "Auto-fix is enabled. Would you like to apply suggested fixes?"


class AnalysisStatus(Enum):
    OK = "ok"
    DEGRADED = "degraded"  # oracle answered but the answer could not be parsed
    FAILED = "failed"  # read error, oracle error or cancellation


@dataclass
class FileAnalysis:
    result: AnalysisResult
    status: AnalysisStatus = AnalysisStatus.OK
    error: Optional[str] = None


@dataclass
class AnalysisSummary:
    """Advisory aggregate over a batch of results."""

    files_analyzed: int
    total_issues: int
    total_suggestions: int
    average_complexity: float
    average_maintainability: float


@dataclass
class AnalysisReport:
    target: Path
    analyses: List[FileAnalysis] = field(default_factory=list)

    @property
    def results(self) -> List[AnalysisResult]:
        return [a.result for a in self.analyses]

    @property
    def failures(self) -> Dict[str, str]:
        return {
            a.result.file: a.error or "unknown error"
            for a in self.analyses
            if a.status is AnalysisStatus.FAILED
        }

    @property
    def summary(self) -> AnalysisSummary:
        return summarize(self.results)


@dataclass
class AutoFixOutcome:
    confirmed: bool
    fixed: Dict[str, List[CodeIssue]] = field(default_factory=dict)

    @property
    def fixed_count(self) -> int:
        return sum(len(issues) for issues in self.fixed.values())


def neutral_result(file_path: str) -> AnalysisResult:
    """Result for a file that could not be analyzed at all."""
    return AnalysisResult(
        file=file_path,
        issues=[],
        suggestions=[],
        metrics=CodeMetrics(
            complexity=0,
            maintainability_index=50,
            performance=PerformanceRating.FAIR,
            security=SecurityRating.MODERATE,
        ),
    )


async def analyze_file_detailed(
    file_path: Path,
    full_analysis: bool,
    oracle: Oracle,
    abort_signal: Optional[asyncio.Event] = None,
) -> FileAnalysis:
    """Analyze one file, reporting how the result was obtained. Never raises."""
    path_str = str(file_path)
    try:
        content = read_text(file_path)
        request = build_analysis_request(
            content, language_for_path(file_path), full_analysis, abort_signal
        )
        response = await oracle.generate(request)
        if not response.success:
            raise RuntimeError(response.error or "AI did not return any analysis content")
        parsed = parse_analysis_response(response.content, path_str)
    except Exception as e:
        logger.warning(f"Could not analyze {file_path}: {e}")
        return FileAnalysis(neutral_result(path_str), AnalysisStatus.FAILED, str(e))

    if parsed.is_ok:
        return FileAnalysis(parsed.value)
    return FileAnalysis(parsed.value, AnalysisStatus.DEGRADED, parsed.error)


async def analyze_file(
    file_path: Path,
    full_analysis: bool,
    oracle: Oracle,
    abort_signal: Optional[asyncio.Event] = None,
) -> AnalysisResult:
    return (await analyze_file_detailed(file_path, full_analysis, oracle, abort_signal)).result


async def analyze_codebase(
    target: Path,
    oracle: Oracle,
    full_analysis: bool = False,
    exclude_dirs: Optional[Iterable[str]] = None,
    settings: Optional[SessionSettings] = None,
    abort_signal: Optional[asyncio.Event] = None,
    on_file: Optional[Callable[[Path], None]] = None,
) -> AnalysisReport:
    """Discover files under target and analyze each one in turn.

    Raises:
        TargetNotFoundError: If target does not exist. Per-file problems are
        never raised.
    """
    files = discover_code_files(target, exclude_dirs)
    logger.info(f"Found {len(files)} code files to analyze under {target}")

    report = AnalysisReport(target=target)
    for file_path in files:
        if on_file is not None:
            on_file(file_path)
        report.analyses.append(
            await analyze_file_detailed(file_path, full_analysis, oracle, abort_signal)
        )

    if settings is not None:
        summary = report.summary
        record_session(
            settings,
            "analysis",
            target,
            {
                "files": summary.files_analyzed,
                "issues": summary.total_issues,
                "suggestions": summary.total_suggestions,
                "failed": len(report.failures),
            },
        )
    return report


def summarize(results: List[AnalysisResult]) -> AnalysisSummary:
    """Totals and arithmetic means over all results; means are 0.0 when empty."""
    count = len(results)
    total_issues = sum(len(r.issues) for r in results)
    total_suggestions = sum(len(r.suggestions) for r in results)
    if count:
        avg_complexity = sum(r.metrics.complexity for r in results) / count
        avg_maintainability = sum(r.metrics.maintainability_index for r in results) / count
    else:
        avg_complexity = avg_maintainability = 0.0

    return AnalysisSummary(
        files_analyzed=count,
        total_issues=total_issues,
        total_suggestions=total_suggestions,
        average_complexity=avg_complexity,
        average_maintainability=avg_maintainability,
    )


def collect_fixable_issues(results: List[AnalysisResult]) -> Dict[str, List[CodeIssue]]:
    """Style and maintainability issues per file, omitting files without any."""
    fixable: Dict[str, List[CodeIssue]] = {}
    for result in results:
        issues = [issue for issue in result.issues if issue.type in FIXABLE_ISSUE_TYPES]
        if issues:
            fixable[result.file] = issues
    return fixable


def apply_auto_fixes(results: List[AnalysisResult], confirm: ConfirmFn) -> AutoFixOutcome:
    """Mark fixable issues as fixed after one confirmation.

    Only records which issues would be fixed; no file is modified.
    """
    fixable = collect_fixable_issues(results)
    if not fixable:
        return AutoFixOutcome(confirmed=False)

    if not confirm(AUTO_FIX_PROMPT):
        logger.info("Auto-fix declined")
        return AutoFixOutcome(confirmed=False)

    for file_path, issues in fixable.items():
        logger.info(f"Marked {len(issues)} issue(s) in {file_path} as fixed")
    return AutoFixOutcome(confirmed=True, fixed=fixable)
